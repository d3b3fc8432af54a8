"""GitHub account as shown on a badge"""
from dataclasses import dataclass


@dataclass(frozen=True)
class User:
    login: str
    name: str = ""
    avatar_url: str = ""

    @property
    def profile_url(self) -> str:
        return f"https://github.com/{self.login}"

    @property
    def display_name(self) -> str:
        """Name if set, else login, else a placeholder."""
        return self.name or self.login or "Unknown"
