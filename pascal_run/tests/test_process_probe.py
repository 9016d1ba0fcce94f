from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

from pascal_run.adapters.process_probe import ProcessProbe
from pascal_run.domain.models import Platform


@pytest.mark.asyncio
async def test_output_combines_stdout_and_stderr():
    probe = ProcessProbe(Platform.current())
    result = await probe.run(
        [sys.executable, "-c", "import sys; print('Free'); print('Pascal', file=sys.stderr); sys.exit(1)"],
        timeout=10,
    )

    assert result is not None
    assert result.returncode == 1
    assert "Free" in result.output and "Pascal" in result.output


@pytest.mark.asyncio
async def test_launch_error_is_none(tmp_path: Path):
    probe = ProcessProbe(Platform.current())
    assert await probe.run([str(tmp_path / "no-such-binary")], timeout=5) is None


@pytest.mark.asyncio
async def test_timeout_is_none():
    probe = ProcessProbe(Platform.current())
    result = await probe.run([sys.executable, "-c", "import time; time.sleep(30)"], timeout=0.5)
    assert result is None


@pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
def test_accessible_requires_execute_bit(tmp_path: Path):
    script = tmp_path / "fpc"
    script.write_text("#!/bin/sh\n", encoding="utf-8")
    script.chmod(0o644)
    assert ProcessProbe.is_accessible(str(script)) is False

    script.chmod(0o755)
    assert ProcessProbe.is_accessible(str(script)) is True
    assert ProcessProbe.exists(str(script)) is True
    assert ProcessProbe.exists(str(tmp_path / "missing")) is False
