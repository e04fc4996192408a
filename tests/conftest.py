#!/usr/bin/python3
# coding=utf-8

import plistlib
import zipfile
from types import SimpleNamespace
from unittest import mock

import pytest

from AppleDeliver import deliverer


@pytest.fixture
def collaborators(monkeypatch):
    """替换掉Deliverer用到的App和IpaUploader，所有调用按顺序记录在recorder中"""
    recorder = mock.MagicMock()
    recorder.metadata.set_all_screenshots_from_path.return_value = False
    apps = []

    class FakeApp(object):

        def __init__(self, app_identifier=None, apple_id=None):
            self.app_identifier = app_identifier
            self.apple_id = apple_id
            self.metadata = recorder.metadata
            apps.append(self)

    class FakeIpaUploader(object):
        identifier = 'com.hello.world'
        version = '1.0.1'

        def __init__(self, app, ipa_path):
            self.app = app
            self.ipa_path = ipa_path
            recorder.ipa_created(ipa_path)

        def fetch_app_identifier(self):
            return self.identifier

        def fetch_app_version(self):
            return self.version

        def upload(self):
            recorder.ipa_upload(self.app.app_identifier)

    monkeypatch.setattr(deliverer, 'App', FakeApp)
    monkeypatch.setattr(deliverer, 'IpaUploader', FakeIpaUploader)
    return SimpleNamespace(recorder=recorder, apps=apps, ipa=FakeIpaUploader)


@pytest.fixture
def make_ipa(tmp_path):
    def _make(identifier='com.hello.world', version='1.0.1', build='42', name='Hello.ipa'):
        path = tmp_path.joinpath(name)
        info = {
            'CFBundleIdentifier': identifier,
            'CFBundleShortVersionString': version,
            'CFBundleVersion': build,
        }
        with zipfile.ZipFile(path, 'w') as ipa:
            ipa.writestr('Payload/Hello.app/Hello', b'\x00')
            ipa.writestr('Payload/Hello.app/Info.plist', plistlib.dumps(info))
            ipa.writestr('Payload/Hello.app/Frameworks/Kit.framework/Info.plist', plistlib.dumps({'CFBundleIdentifier': 'kit'}))
        return path
    return _make


@pytest.fixture
def ec_key():
    """ES256需要的P-256私钥"""
    from cryptography.hazmat.primitives import serialization
    from cryptography.hazmat.primitives.asymmetric import ec

    private_key = ec.generate_private_key(ec.SECP256R1())
    pem = private_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()
    return SimpleNamespace(pem=pem, public_key=private_key.public_key())
