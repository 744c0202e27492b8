"""
Converters for job control: `jobs` and `kill`.
"""

import re
from typing import List, Optional

from ..config.config import JOB_SPEC_NAMES, SIGNAL_LIST, SIGNAL_NUMBERS
from ..conversion.base import CommandConverter

JOB_NUMBER_REGEX = re.compile(r"^%(\d+)$")


def job_id(spec: str) -> str:
    """Maps a job spec (`%1`, `%%`, `%+`, `%-`) to the id used in `jobs` output."""
    if spec in JOB_SPEC_NAMES:
        return JOB_SPEC_NAMES[spec]
    match = JOB_NUMBER_REGEX.match(spec)
    if match:
        return match.group(1)
    return spec.lstrip("%")


class JobsConverter(CommandConverter):
    name = "jobs"
    description = "Converts jobs to a filtered Nushell job table"

    def _convert(self, args: List[str]) -> str:
        pids_only = long_format = False
        status = None
        specs = []

        for arg in args:
            if arg.startswith("-") and len(arg) > 1:
                for flag in arg[1:]:
                    if flag == "p":
                        pids_only = True
                    elif flag == "l":
                        long_format = True
                    elif flag == "r":
                        status = "running"
                    elif flag == "s":
                        status = "stopped"
                    # -n (changed since last report) has no equivalent
            else:
                specs.append(arg)

        result = "jobs"
        if status:
            result += f' | where status == "{status}"'
        if specs:
            condition = " or ".join(f'job_id == "{job_id(spec)}"' for spec in specs)
            result += f" | where ({condition})"
        if pids_only:
            result += " | get pid"
        elif long_format:
            result += " | select job_id pid command status"
        return result


class KillConverter(CommandConverter):
    """
    Converts `kill` to Nushell's `kill`.

    Signal names (with or without a SIG prefix) become `--signal NUMBER`.
    Job specs are resolved to pids through the job table.
    """

    name = "kill"
    description = "Converts kill, resolving signals to numbers and job specs to pids"

    def _convert(self, args: List[str]) -> str:
        signal: Optional[str] = None
        targets = []

        i = 0
        while i < len(args):
            arg = args[i]
            if arg == "--":
                targets.extend(args[i + 1 :])
                break
            if arg in ("-l", "-L", "--list"):
                return f"# Signal list: {SIGNAL_LIST}"
            if arg in ("-s", "--signal", "-n"):
                if i + 1 < len(args):
                    i += 1
                    signal = self._signal_number(args[i])
            elif arg.startswith("-") and len(arg) > 1:
                signal = self._signal_number(arg[1:])
            else:
                targets.append(arg)
            i += 1

        flag = f" --signal {signal}" if signal else ""
        jobs = [target for target in targets if target.startswith("%")]
        pids = [target for target in targets if not target.startswith("%")]

        parts = []
        for spec in jobs:
            parts.append(f'jobs | where job_id == "{job_id(spec)}" | get pid | each {{ |pid| kill{flag} $pid }}')
        if len(pids) == 1:
            parts.append(f"kill{flag} {self.quote(pids[0])}")
        elif pids:
            parts.append(f"[{' '.join(self.quote(pid) for pid in pids)}] | each {{ |pid| kill{flag} $pid }}")

        if not parts:
            return "kill # Usage: kill [-signal] pid..."
        return "; ".join(parts)

    def _signal_number(self, signal: str) -> str:
        name = signal.upper()
        if name.startswith("SIG"):
            name = name[3:]
        if name in SIGNAL_NUMBERS:
            return str(SIGNAL_NUMBERS[name])
        return signal
