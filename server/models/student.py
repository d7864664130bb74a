from pydantic import BaseModel
from typing import Optional

class AccountRequest(BaseModel):
    account: Optional[str] = None

class StudentAuthRequest(BaseModel):
    account: Optional[str] = None
    uniId: Optional[str] = None
