from datetime import datetime
from uuid import UUID


class CreateUserDto:
    email: str
    password: str
    created_at: datetime | None = None


class UserDto:
    id: UUID
    email: str
    created_at: datetime
