from typing import Optional
from procurement.repositories.base import BaseRepository
from procurement.models.user import User

class UserRepository(BaseRepository[User]):
    async def get_by_username(self, username: str) -> Optional[User]:
        return await self.get_by_field("username", username)

    async def get_by_email(self, email: str) -> Optional[User]:
        return await self.get_by_field("email", email)
