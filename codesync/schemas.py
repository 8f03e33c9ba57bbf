"""
Wire and state models for codesync rooms.

Field names follow the JSON the browser client speaks (camelCase), so
``model_dump()`` output can be sent over the socket as is.
"""
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class PresenceStatus(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"


class TestCase(BaseModel):
    __test__ = False  # keep pytest from collecting this model

    input: str = ""
    expectedOutput: str = ""


class Task(BaseModel):
    id: str = Field(..., description="Task identifier")
    title: str = Field("", description="Short task title")
    description: str = Field("", description="Task statement shown to participants")
    testCases: List[TestCase] = Field(default_factory=list)


class Participant(BaseModel):
    """One admitted, named connection in one room."""

    username: str
    roomId: str
    status: PresenceStatus = PresenceStatus.ONLINE
    cursorPosition: int = 0
    typing: bool = False
    currentFile: Optional[str] = None
    socketId: str
    isAdmin: bool = False
    isCollaborative: bool = True


class RoomPolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    roomId: str
    isCollaborative: bool = True
    tasks: Optional[Tuple[Task, ...]] = None


class PendingJoinRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    socketId: str
    username: str
    roomId: str


# ---------- inbound payloads ----------

class JoinRequest(BaseModel):
    roomId: str = Field(..., min_length=1)
    username: str = Field(..., min_length=1)
    isCollaborative: Optional[bool] = None
    tasks: Optional[List[Task]] = None


class AdmissionResponse(BaseModel):
    socketId: str
    username: Optional[str] = None
    accepted: bool = False
