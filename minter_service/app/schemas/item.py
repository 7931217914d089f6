from pydantic import BaseModel, Field


class ItemCreate(BaseModel):
    seed: int = Field(0, ge=0)
    tokenSupply: int = Field(1, gt=0)
