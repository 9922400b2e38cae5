from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AuthUser(BaseModel):
    """
    Represents an authenticated user from a Supabase access token.
    """

    user_id: str = Field(..., alias="sub")
    email: Optional[str] = None
    role: str = "authenticated"

    model_config = ConfigDict(populate_by_name=True)
