from pydantic import BaseModel


class SweepResponse(BaseModel):
    success: bool
    message: str
    processed: int
    lost: int
    failed: int


class ResolveResponse(BaseModel):
    bet_id: str
    resolved: bool
    status: str
