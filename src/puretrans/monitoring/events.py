# Copyright 2025 KTTC AI (https://github.com/kttc-ai)
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Pipeline telemetry events."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from puretrans.core.models import utc_now


class EventType(str, Enum):
    """Kinds of telemetry events emitted by the pipeline."""

    TRANSLATION_STARTED = "translation_started"
    TRANSLATION_COMPLETED = "translation_completed"
    TRANSLATION_FAILED = "translation_failed"
    ATTEMPT_COMPLETED = "attempt_completed"
    PURITY_VIOLATION = "purity_violation"
    FALLBACK_TRIGGERED = "fallback_triggered"
    CACHE_HIT = "cache_hit"
    CACHE_MISS = "cache_miss"
    USER_FEEDBACK_RECEIVED = "user_feedback_received"


class TranslationEvent(BaseModel):
    """An immutable telemetry record.

    Payload keys by event type:
        translation_completed: purity_score, processing_time_ms,
            quality_score, method, pure
        translation_failed: reason
        attempt_completed: method, succeeded, accepted, errors,
            duration_ms, purity_score
        purity_violation: method, violation_types
        fallback_triggered: method, reason
        user_feedback_received: rating
    """

    model_config = ConfigDict(frozen=True)

    event_type: EventType
    request_id: str = ""
    timestamp: datetime = Field(default_factory=utc_now)
    payload: dict[str, Any] = Field(default_factory=dict)
