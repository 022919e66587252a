from __future__ import annotations

from typing import Iterable

from app.scheduling.types import EmployeeProfile, SkillCoverage


def evaluate(required: Iterable[int], available: Iterable[int]) -> SkillCoverage:
    """covered = required & available, missing = required - available."""
    req = frozenset(required)
    avail = frozenset(available)
    return SkillCoverage(
        required=req,
        available=avail,
        covered=req & avail,
        missing=req - avail,
    )


def roster_skills(employees: Iterable[EmployeeProfile]) -> frozenset[int]:
    """Union of the skills held by everyone on a day's roster."""
    skills: set[int] = set()
    for e in employees:
        skills |= e.skill_ids
    return frozenset(skills)
