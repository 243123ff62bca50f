import sys
from pathlib import Path

import pytest

# (1) Add repository root to sys.path to enable absolute imports
#     The root directory contains scripts/, src/, and config/.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture()
def clean_dataset() -> dict[str, list[dict]]:
    """
    @brief
    Fully consistent clients/workers/tasks snapshot.

    @details
    Every check of a validation pass must come back empty for this data,
    so tests can introduce exactly one defect at a time.
    """
    return {
        "clients": [
            {
                "ClientID": "C1",
                "ClientName": "Acme",
                "PriorityLevel": 3,
                "RequestedTaskIDs": "T1, T2",
                "AttributesJSON": '{"tier": "gold"}',
            },
            {
                "ClientID": "C2",
                "ClientName": "Globex",
                "PriorityLevel": "5",
                "RequestedTaskIDs": "T2",
                "AttributesJSON": "{}",
            },
        ],
        "workers": [
            {
                "WorkerID": "W1",
                "WorkerName": "Ada",
                "Skills": "coding, testing",
                "AvailableSlots": "[1,2,3]",
                "MaxLoadPerPhase": 2,
            },
            {
                "WorkerID": "W2",
                "WorkerName": "Linus",
                "Skills": "coding",
                "AvailableSlots": "[1,2]",
                "MaxLoadPerPhase": 1,
            },
        ],
        "tasks": [
            {
                "TaskID": "T1",
                "TaskName": "Build",
                "Duration": 2,
                "RequiredSkills": "coding",
                "PreferredPhases": "[1,2]",
                "MaxConcurrent": 2,
            },
            {
                "TaskID": "T2",
                "TaskName": "Test",
                "Duration": 1,
                "RequiredSkills": "coding, testing",
                "MaxConcurrent": 1,
            },
        ],
    }
