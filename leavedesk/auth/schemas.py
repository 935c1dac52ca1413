"""Auth Pydantic schemas for request / response validation."""


from pydantic import BaseModel, EmailStr, field_validator

from leavedesk.employees.schemas import EmployeeBase, EmployeeOut


# ── Requests ────────────────────────────────────────────────────────

class RegisterRequest(EmployeeBase):
    """Self-registration payload. The role is never client-chosen."""


class LoginRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        return v.strip().lower()


# ── Responses ───────────────────────────────────────────────────────

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: EmployeeOut
