from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

from execlink.adapters.link_errors import LinkError
from execlink.domain.ports import ProbePort
from execlink.usecases.error_mapping import failure_code

_log = logging.getLogger(__name__)


@dataclass
class CheckPortStatus:
    probe: ProbePort

    async def __call__(self, port: Union[str, int]) -> bool:
        try:
            return bool(await self.probe.is_live(str(port)))
        except (LinkError, OSError) as exc:
            _log.debug("Port check on %s failed (%s): %s", port, failure_code(exc), exc)
            return False
