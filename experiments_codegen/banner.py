#!/usr/bin/env python3
"""
Static text placed at the top of every generated file.
"""

from datetime import datetime, timezone


COPYRIGHT_LINES = [
    " Copyright {year} The gRPC Authors",
    "",
    " Licensed under the Apache License, Version 2.0 (the \"License\");",
    " you may not use this file except in compliance with the License.",
    " You may obtain a copy of the License at",
    "",
    "     http://www.apache.org/licenses/LICENSE-2.0",
    "",
    " Unless required by applicable law or agreed to in writing, software",
    " distributed under the License is distributed on an \"AS IS\" BASIS,",
    " WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.",
    " See the License for the specific language governing permissions and",
    " limitations under the License.",
]

CODEGEN_PLACEHOLDER_TEXT = """
This file contains the autogenerated parts of the experiments API.

It generates two symbols for each experiment.

For the experiment named new_car_project, it generates:

- a function IsNewCarProjectEnabled() that returns true if the experiment
  should be enabled at runtime.

- a macro GRPC_EXPERIMENT_IS_INCLUDED_NEW_CAR_PROJECT that is defined if the
  experiment *could* be enabled at runtime.

The function is used to determine whether to run the experiment or
non-experiment code path.

If the experiment brings significant bloat, the macro can be used to avoid
including the experiment code path in the binary for binaries that are size
sensitive.

By default that includes our iOS and Android builds.

Finally, a small array is included that contains the metadata for each
experiment.

A macro, GRPC_EXPERIMENTS_ARE_FINAL, controls whether we fix experiment
configuration at build time (if it's defined) or allow it to be tuned at
runtime (if it's disabled).

If you are using the Bazel build system, that macro can be configured with
--define=grpc_experiments_are_final=true
"""


def put_banner(prefix, lines):
    """Prefix every line (splitting embedded newlines) with a comment marker."""
    output = ""
    for line in lines:
        for part in line.split('\n'):
            output += f"{prefix}{part}".rstrip() + "\n"
    return output


def get_copyright(prefix, year=None):
    """Copyright block for generated files, stamped with the current UTC year."""
    if year is None:
        year = datetime.now(timezone.utc).year
    lines = [line.format(year=year) for line in COPYRIGHT_LINES]
    return put_banner(prefix, lines) + put_banner(prefix, [""])
