"""
Silence lifecycle operations against Alertmanager. Silences are created and deleted here but never modified in place.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""
from typing import Optional
from urllib.parse import quote

import httpx

from models.alerting.silences import Silence
from services.alerting.errors import SilenceCreateFailed, SilenceDeleteFailed, SilenceIDNotFound

CREATE_SUCCESS_CODES = {200, 202}


async def create_silence(service, silence: Silence) -> Optional[str]:
    body = silence.to_postable()
    service.logger.debug("Submitting silence: %s", body)
    try:
        response = await service._client.post(
            f"{service.alertmanager_url}/api/v2/silences",
            json=body,
        )
    except httpx.HTTPError as exc:
        service.logger.error("Error creating silence: %s", exc)
        raise SilenceCreateFailed(f"failed to create silence: {exc}") from exc

    if response.status_code not in CREATE_SUCCESS_CODES:
        service.logger.error("Alertmanager rejected silence with status %s", response.status_code)
        raise SilenceCreateFailed(
            "failed to create silence",
            status_code=response.status_code,
            body=response.text,
        )

    try:
        silence_id = (response.json() or {}).get("silenceID")
    except (ValueError, AttributeError):
        silence_id = None
    service.logger.info("Created silence %s", silence_id or "<unknown id>")
    return silence_id


async def delete_silence(service, silence_id: str) -> None:
    silence_id = (silence_id or "").strip()
    if not silence_id:
        raise SilenceIDNotFound()

    try:
        response = await service._client.delete(f"{service.alertmanager_url}/api/v2/silence/{quote(silence_id, safe='')}")
    except httpx.HTTPError as exc:
        service.logger.error("Error deleting silence %s: %s", silence_id, exc)
        raise SilenceDeleteFailed(f"failed to delete silence {silence_id}: {exc}") from exc

    if response.status_code != 200:
        service.logger.error("Alertmanager refused to delete silence %s: %s", silence_id, response.status_code)
        raise SilenceDeleteFailed(
            f"failed to delete silence {silence_id}",
            status_code=response.status_code,
            body=response.text,
        )
    service.logger.info("Deleted silence %s", silence_id)
