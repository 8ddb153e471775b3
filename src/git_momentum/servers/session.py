from typing import Any

from fastmcp.server import FastMCP
from fastmcp.tools import Tool
from pydantic import BaseModel, Field

from git_momentum.clients.models.github import User
from git_momentum.servers.base import BaseViewServer
from git_momentum.servers.shared.annotations import TOKEN, VIEW
from git_momentum.session import SessionSnapshot


class NotificationPreference(BaseModel):
    label: str = Field(description="What the notification is about.")
    enabled: bool = Field(description="Whether the notification is enabled.")


NOTIFICATION_PREFERENCES: list[NotificationPreference] = [
    NotificationPreference(label="In-app alerts for dormant repos", enabled=True),
    NotificationPreference(label="Weekly health summary", enabled=True),
    NotificationPreference(label="Streak preservation warnings", enabled=False),
]


class Settings(BaseModel):
    """The settings page."""

    account: User | None = Field(default=None, description="The connected GitHub account.")
    notifications: list[NotificationPreference] = Field(description="The notification preferences.")


class SessionServer(BaseViewServer):
    """Connecting, navigating and logging out."""

    def register_tools(self, fastmcp: FastMCP[Any]) -> FastMCP[Any]:
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.connect))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.logout))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.get_session))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.select_view))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.get_settings))

        return fastmcp

    async def connect(self, token: TOKEN) -> SessionSnapshot:
        """Connect to GitHub with a personal access token and load your profile and repositories.

        If GitHub rejects the token it is discarded and you need to connect again."""

        self.session.set_token(token=token)

        await self.session.load()

        return self.session.snapshot()

    async def logout(self) -> SessionSnapshot:
        """Log out, forgetting the stored token and everything loaded with it."""

        self.session.clear()

        self.logger.info("Logged out")

        return self.session.snapshot()

    async def get_session(self) -> SessionSnapshot:
        """Get the connected account, the number of repositories and the current view."""

        if self.session.is_connected:
            await self.session.load()

        return self.session.snapshot()

    async def select_view(self, view: VIEW) -> SessionSnapshot:
        """Switch to another view. Switching to the dashboard clears the selected repository."""

        _ = self.session.require_token()

        self.session.select_view(view=view)

        return self.session.snapshot()

    async def get_settings(self) -> Settings:
        """Get the connected account and notification preferences."""

        if self.session.is_connected:
            await self.session.load()

        return Settings(account=self.session.user, notifications=NOTIFICATION_PREFERENCES)
