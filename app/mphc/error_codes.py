from __future__ import annotations

"""Error code taxonomy for downloader failures.

The codes appear in structured log lines and on ``DownloadResult`` so an
operator can tell why a link was skipped or a run gave up.
"""


class ErrorCode:
    RESULTS_TIMEOUT = "results_timeout"
    NO_LINKS = "no_links"
    NAVIGATION = "navigation_error"
    NETWORK = "network_error"
    HTTP_STATUS = "http_status"
    WRITE_FAILED = "write_failed"
    INTERNAL = "internal_error"


__all__ = ["ErrorCode"]
