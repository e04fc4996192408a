#!/usr/bin/python3
# coding=utf-8

import pytest

from AppleDeliver import __version__
from AppleDeliver.cli import main


def test_deliverfile(collaborators, tmp_path):
    tmp_path.joinpath('Deliverfile').write_text("app_identifier('com.hello.world')\nversion('1.0.1')\n")
    assert main([str(tmp_path)]) == 0
    collaborators.recorder.metadata.upload.assert_called_once_with()


def test_missing_deliverfile(collaborators, tmp_path, caplog):
    assert main([str(tmp_path), '-v']) == 1
    assert 'Deliverfile' in caplog.text


def test_failed_unit_tests(collaborators, tmp_path, caplog):
    tmp_path.joinpath('Deliverfile').write_text("app_identifier('com.hello.world')\nversion('1.0.1')\nunit_tests(lambda: 0)\n")
    assert main([str(tmp_path)]) == 1
    assert 'unit_tests' in caplog.text
    collaborators.recorder.metadata.upload.assert_not_called()


def test_version(capsys):
    with pytest.raises(SystemExit):
        main(['--version'])
    assert __version__ in capsys.readouterr().out


def test_ipa_upload_error(collaborators, tmp_path, caplog):
    from AppleDeliver.ipa_uploader import IpaUploadError

    def upload(identifier):
        raise IpaUploadError('无法运行xcrun altool')

    collaborators.recorder.ipa_upload.side_effect = upload
    tmp_path.joinpath('Deliverfile').write_text("ipa('Hello.ipa')\n")
    assert main([str(tmp_path)]) == 1
    assert 'xcrun' in caplog.text
