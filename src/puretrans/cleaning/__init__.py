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

"""Content cleaning: rules and the cleaner that applies them."""

from puretrans.cleaning.cleaner import CleaningStats, ContentCleaner, collapse_whitespace
from puretrans.cleaning.rules import (
    CleaningRule,
    CleaningRuleError,
    LiteralRule,
    PatternRule,
    ScriptRangeRule,
)

__all__ = [
    "CleaningRule",
    "CleaningRuleError",
    "CleaningStats",
    "ContentCleaner",
    "LiteralRule",
    "PatternRule",
    "ScriptRangeRule",
    "collapse_whitespace",
]
