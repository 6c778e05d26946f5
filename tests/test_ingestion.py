"""
Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import asyncio
import json
import threading
import unittest

try:
    from ._env import ensure_test_env
except ImportError:
    from tests._env import ensure_test_env

ensure_test_env()

from services.alerting.errors import InvalidPayload, StorageError
from services.alerting.ingestion import IngestionPipeline, decode_payload


def _alert_dict(fingerprint='fp-1', alertname='HighCPUUsage', **overrides):
    alert = {
        'status': 'firing',
        'labels': {'alertname': alertname, 'severity': 'critical'},
        'annotations': {'summary': 'CPU high'},
        'startsAt': '2026-01-01T00:00:00Z',
        'endsAt': '0001-01-01T00:00:00Z',
        'generatorURL': 'http://prometheus/graph',
        'fingerprint': fingerprint,
    }
    alert.update(overrides)
    return alert


def _payload(*alerts, **extra):
    body = {
        'receiver': 'alertkeeper',
        'status': 'firing',
        'alerts': list(alerts),
        'groupLabels': {'alertname': 'HighCPUUsage'},
        'commonLabels': {},
        'commonAnnotations': {},
        'externalURL': 'http://alertmanager:9093',
        'version': '4',
        'groupKey': '{}:{alertname="HighCPUUsage"}',
        'truncatedAlerts': 0,
    }
    body.update(extra)
    return json.dumps(body).encode()


class DecodePayloadTests(unittest.TestCase):
    def test_decodes_full_alertmanager_payload(self):
        payload = decode_payload(_payload(_alert_dict(), _alert_dict(fingerprint='fp-2')))
        self.assertEqual(payload.receiver, 'alertkeeper')
        self.assertEqual([a.fingerprint for a in payload.alerts], ['fp-1', 'fp-2'])
        self.assertIsNone(payload.alerts[0].ends_at)
        self.assertEqual(payload.alerts[0].alert_name, 'HighCPUUsage')

    def test_keeps_real_end_time(self):
        payload = decode_payload(_payload(_alert_dict(status='resolved', endsAt='2026-01-01T01:00:00Z')))
        self.assertEqual(payload.alerts[0].ends_at.hour, 1)

    def test_rejects_invalid_json(self):
        with self.assertRaises(InvalidPayload):
            decode_payload(b'{"alerts": [')

    def test_rejects_unknown_top_level_field(self):
        with self.assertRaises(InvalidPayload):
            decode_payload(_payload(_alert_dict(), unexpected='x'))

    def test_rejects_unknown_alert_field(self):
        with self.assertRaises(InvalidPayload):
            decode_payload(_payload(_alert_dict(extra='nope')))

    def test_rejects_alert_without_alertname(self):
        alert = _alert_dict()
        alert['labels'] = {'severity': 'critical'}
        with self.assertRaises(InvalidPayload):
            decode_payload(_payload(alert))

    def test_rejects_unknown_status(self):
        with self.assertRaises(InvalidPayload):
            decode_payload(_payload(_alert_dict(status='pending')))

    def test_rejects_missing_fingerprint(self):
        alert = _alert_dict()
        del alert['fingerprint']
        with self.assertRaises(InvalidPayload):
            decode_payload(_payload(alert))


class RecordingStore:
    def __init__(self, failing=()):
        self.failing = set(failing)
        self.saved = []
        self._lock = threading.Lock()

    def upsert(self, alert):
        if alert.fingerprint in self.failing:
            raise StorageError(f'connection lost for {alert.fingerprint}')
        with self._lock:
            self.saved.append(alert.fingerprint)


class IngestionPipelineTests(unittest.IsolatedAsyncioTestCase):
    async def test_dispatch_stores_every_alert(self):
        store = RecordingStore()
        pipeline = IngestionPipeline(store)
        payload = decode_payload(_payload(*[_alert_dict(fingerprint=f'fp-{i}') for i in range(5)]))

        dispatched = pipeline.dispatch(payload.alerts)
        self.assertEqual(dispatched, 5)
        await pipeline.drain()

        self.assertEqual(sorted(store.saved), [f'fp-{i}' for i in range(5)])
        self.assertEqual(pipeline.pending, 0)

    async def test_dispatch_returns_before_storage_completes(self):
        release = threading.Event()

        class SlowStore(RecordingStore):
            def upsert(self, alert):
                release.wait(timeout=5)
                super().upsert(alert)

        store = SlowStore()
        pipeline = IngestionPipeline(store)
        pipeline.dispatch(decode_payload(_payload(_alert_dict())).alerts)
        await asyncio.sleep(0)

        self.assertEqual(store.saved, [])
        self.assertEqual(pipeline.pending, 1)
        release.set()
        await pipeline.drain()
        self.assertEqual(store.saved, ['fp-1'])

    async def test_storage_failure_is_isolated(self):
        store = RecordingStore(failing={'fp-bad'})
        pipeline = IngestionPipeline(store)
        payload = decode_payload(_payload(
            _alert_dict(fingerprint='fp-1'),
            _alert_dict(fingerprint='fp-bad'),
            _alert_dict(fingerprint='fp-2'),
        ))

        with self.assertLogs('services.alerting.ingestion', level='ERROR') as logs:
            pipeline.dispatch(payload.alerts)
            await pipeline.drain()

        self.assertEqual(sorted(store.saved), ['fp-1', 'fp-2'])
        self.assertTrue(any('fp-bad' in line for line in logs.output))

    async def test_unexpected_failure_is_logged_not_raised(self):
        class BrokenStore:
            def upsert(self, alert):
                raise RuntimeError('boom')

        pipeline = IngestionPipeline(BrokenStore())
        with self.assertLogs('services.alerting.ingestion', level='ERROR'):
            pipeline.dispatch(decode_payload(_payload(_alert_dict())).alerts)
            await pipeline.drain()
        self.assertEqual(pipeline.pending, 0)

    async def test_empty_batch_dispatches_nothing(self):
        pipeline = IngestionPipeline(RecordingStore())
        self.assertEqual(pipeline.dispatch([]), 0)
        await pipeline.drain()


if __name__ == '__main__':
    unittest.main()
