"""Shared HTTP plumbing for LLM adapters."""

from __future__ import annotations

from typing import Any, cast

import requests

from ..errors import ModelTimeout, ProviderError


def post_json(
    url: str,
    *,
    headers: dict[str, str],
    payload: dict[str, Any],
    timeout: float,
    provider: str,
) -> dict[str, Any]:
    """POST ``payload`` and return the decoded JSON body.

    Transport failures are mapped onto the model error taxonomy so callers
    only ever see ``ModelError`` subclasses.
    """

    try:
        resp = requests.post(url, headers=headers, json=payload, timeout=timeout)
        resp.raise_for_status()
        return cast(dict[str, Any], resp.json())
    except requests.Timeout as exc:
        raise ModelTimeout(f"{provider} API call timed out after {timeout:.0f}s") from exc
    except requests.HTTPError as exc:
        raise ProviderError(f"{provider} API call failed: {exc}") from exc
    except requests.RequestException as exc:
        raise ProviderError(f"{provider} API call failed: {exc}") from exc
    except ValueError as exc:
        raise ProviderError(f"{provider} returned a non-JSON body") from exc


__all__ = ["post_json"]
