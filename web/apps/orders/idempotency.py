"""Idempotency records for order creation.

A client may send ``Idempotency-Key`` with ``POST /api/orders/``. The first
request with a key stores a record holding a hash of the payload; once the
request is answered the status and body are saved on it. Retries with the
same key and payload get the saved answer back, while reusing the key with a
different payload is a conflict.
"""

import hashlib
import json

from django.db import IntegrityError, transaction

from .models import IdempotencyKey


def _hash(payload) -> str:
    """Stable SHA-256 hex digest of a JSON-serializable payload.

    Keys are sorted and separators compact so equal payloads hash equally
    regardless of key order.
    """
    body = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(body.encode("utf-8")).hexdigest()


@transaction.atomic
def get_or_create_idempotent(key: str, payload) -> tuple[bool, IdempotencyKey]:
    """Get-or-create the record for ``key``.

    The create path runs in a nested savepoint so an IntegrityError (key
    already taken) only rolls back that block; the existing record is then
    read under a row lock.

    Args:
        key: Client-provided idempotency key.
        payload: Request payload used to compute the request hash.

    Returns:
        tuple[bool, IdempotencyKey]: ``(existing, rec)``; ``existing`` is
        True when the key had been seen before.

    Raises:
        ValueError: 'IDEMPOTENCY_CONFLICT' when the key exists with a
            different payload hash.
    """
    h = _hash(payload)

    try:
        with transaction.atomic():
            rec = IdempotencyKey.objects.create(
                key=key, request_hash=h, response_status=0, response_body={}
            )
            return False, rec
    except IntegrityError:
        rec = IdempotencyKey.objects.select_for_update().get(key=key)
        if rec.request_hash != h:
            raise ValueError("IDEMPOTENCY_CONFLICT")
        return True, rec


def finalize(rec: IdempotencyKey, status_code: int, body: dict, order_id=None) -> None:
    """Store the answer given to the request that created ``rec``.

    Args:
        rec: The idempotency record to update.
        status_code: HTTP status code of the response.
        body: JSON-serializable response body.
        order_id: Id of the created order, if any, so replays can rebuild
            the ``Location`` header.
    """
    rec.response_status = status_code
    rec.response_body = body
    if order_id is not None:
        rec.order_id = order_id
    rec.save(update_fields=["response_status", "response_body", "order"])


def release(rec: IdempotencyKey) -> None:
    """Drop ``rec`` so a retry with the same key is processed afresh.

    Used when the request failed upstream and nothing was stored.
    """
    rec.delete()
