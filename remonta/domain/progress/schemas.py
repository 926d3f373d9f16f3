"""Progress domain schemas"""

from typing import Optional

from pydantic import BaseModel


class SetupProgress(BaseModel):
    accountDetails: bool = False
    compliance: bool = False
    trainings: bool = False
    services: bool = False


class CurrentSectionUpdate(BaseModel):
    section: str


class SectionCompletionUpdate(BaseModel):
    completed: bool


class SetupProgressResponse(BaseModel):
    currentSection: Optional[str] = None
    progress: SetupProgress
    verificationStatus: str
    completionPercentage: int


class SectionCompletionResponse(BaseModel):
    progress: SetupProgress
    verificationStatus: str
