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

"""
puretrans - zero-tolerance Arabic/French legal translation.

Every request yields either a translation that scored a perfect 100 on
script, terminology, encoding, coherence and artifact checks, or clearly
marked fallback content. Contaminated output is never returned.
"""

__version__ = "0.1.0"

from puretrans.core import (
    ContentType,
    Language,
    LegalDomain,
    PureTranslationResult,
    TranslationContext,
    TranslationGateway,
    TranslationMethod,
    TranslationRequest,
    UserIssueReport,
)
from puretrans.utils.config import PipelineSettings, get_settings

__all__ = [
    "ContentType",
    "Language",
    "LegalDomain",
    "PipelineSettings",
    "PureTranslationResult",
    "TranslationContext",
    "TranslationGateway",
    "TranslationMethod",
    "TranslationRequest",
    "UserIssueReport",
    "__version__",
    "get_settings",
]
