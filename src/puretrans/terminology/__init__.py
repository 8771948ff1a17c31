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

"""Legal terminology: dictionaries, lookup, and consistency validation."""

from puretrans.terminology.manager import (
    LegalTerminologyManager,
    load_builtin_dictionaries,
    load_dictionaries,
    normalize_term,
)
from puretrans.terminology.models import (
    LegalDictionary,
    LegalTermEntry,
    LegalTermTranslation,
    TermInconsistency,
    TerminologyValidation,
    TermMatch,
)

__all__ = [
    "LegalDictionary",
    "LegalTermEntry",
    "LegalTermTranslation",
    "LegalTerminologyManager",
    "TermInconsistency",
    "TermMatch",
    "TerminologyValidation",
    "load_builtin_dictionaries",
    "load_dictionaries",
    "normalize_term",
]
