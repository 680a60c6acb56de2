from __future__ import annotations

from dataclasses import asdict

from pydantic import Field

from nexus.application.dtos.common_dto import CamelModel
from nexus.domain.entities.profile import ProfileEntity


class PortfolioCompanyModel(CamelModel):
    name: str = Field(..., examples=["Acme Robotics"])
    industry: str = Field(..., examples=["Robotics"])


class ProfileFields(CamelModel):
    company: str | None = Field(None, examples=["Acme Robotics"])
    title: str | None = Field(None, examples=["CEO"])
    industry: str | None = Field(None, examples=["Fintech"])
    stage: str | None = Field(None, description="Funding stage, e.g. seed or series-a")
    founded: int | None = Field(None, examples=[2021])
    employees: int | None = Field(None, ge=0)
    funding_amount: int | None = Field(None, ge=0)
    funding_use: str | None = None
    equity_offered: int | None = Field(None, ge=0, le=100)
    website: str | None = None
    linkedin: str | None = None
    skills: list[str] | None = None
    portfolio_companies: list[PortfolioCompanyModel] | None = None
    investment_interests: list[str] | None = None


class ProfileResponse(ProfileFields):
    id: int
    user_id: int

    @classmethod
    def from_entity(cls, profile: ProfileEntity) -> ProfileResponse:
        return cls(**asdict(profile))


class UpdateProfileRequest(ProfileFields):
    """Partial profile write; only the keys present in the body are applied.

    ``bio``, ``location`` and ``avatar`` live on the user record and are
    updated there.
    """
    bio: str | None = None
    location: str | None = None
    avatar: str | None = None
