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

"""CLI subcommands for puretrans."""

from puretrans.cli.commands.system import config, health
from puretrans.cli.commands.terms import terms_app
from puretrans.cli.commands.translate import translate
from puretrans.cli.commands.validate import validate

__all__ = [
    "config",
    "health",
    "terms_app",
    "translate",
    "validate",
]
