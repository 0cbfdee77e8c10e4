# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
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

"""Configuration text parsing."""

from .hcl_parser import HCLLexer, HCLParser, Token, TokenType, parse_hcl
from .loader import build_resource, load_configuration, resource_address

__all__ = [
    "HCLLexer",
    "HCLParser",
    "Token",
    "TokenType",
    "build_resource",
    "load_configuration",
    "parse_hcl",
    "resource_address",
]
