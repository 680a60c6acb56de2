from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PortfolioCompany:
    name: str
    industry: str


@dataclass(frozen=True)
class ProfileEntity:
    id: int
    user_id: int  # one-to-one with UserEntity.id
    company: str | None = None
    title: str | None = None
    industry: str | None = None
    stage: str | None = None  # entrepreneurs: seed, series-a, ...
    founded: int | None = None
    employees: int | None = None
    funding_amount: int | None = None
    funding_use: str | None = None
    equity_offered: int | None = None
    website: str | None = None
    linkedin: str | None = None
    skills: list[str] | None = None
    portfolio_companies: list[PortfolioCompany] | None = None
    investment_interests: list[str] | None = None


# Fields a profile write may patch; id and user_id are fixed at creation.
PROFILE_FIELDS: tuple[str, ...] = (
    "company",
    "title",
    "industry",
    "stage",
    "founded",
    "employees",
    "funding_amount",
    "funding_use",
    "equity_offered",
    "website",
    "linkedin",
    "skills",
    "portfolio_companies",
    "investment_interests",
)
