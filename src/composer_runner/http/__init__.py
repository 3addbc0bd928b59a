"""HTTP helpers for downloading the Composer installer."""

from composer_runner.http.fetcher import InstallerFetcher

__all__ = ["InstallerFetcher"]
