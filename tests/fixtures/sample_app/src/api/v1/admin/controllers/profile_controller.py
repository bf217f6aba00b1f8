from typing import Annotated

from framework import Body, Controller, Get, Param, Patch, Public, UseGuards

from ..dto import MenuNode, ProfileDto, UpdateProfileDto


@Controller("admin")
@UseGuards(JwtAuthGuard, RolesGuard)
class AdminController:
    """Administration endpoints."""

    @Get("profile")
    async def get_profile(self) -> ProfileDto:
        """Get the admin profile.

        Returns the profile of the current administrator.
        """

    @Patch("profile/:id")
    async def update_profile(
        self,
        profile_id: Annotated[str, Param("id")],
        body: Annotated[UpdateProfileDto, Body()],
    ) -> ProfileDto:
        """Update the admin profile."""

    @Get("menu")
    def menu(self) -> MenuNode:
        pass

    @Public()
    @Get("health")
    def health(self) -> dict:
        pass

    def _audit(self, message: str) -> None:
        pass
