#!/usr/bin/python3
# coding=utf-8
# 整个发布流程
#
# - 解析Deliverfile(或直接传入的字典)
# - 暂存Deliverfile中的所有值，直到Deliverfile执行完
# - 校验ipa信息，运行unit_tests，上传元数据和ipa

import logging
import re
from enum import Enum

from .apple_api_agent import AppleAPIError
from .app import App
from .deliverfile import Deliverfile, DeliverfileDSLError, INVALID_KEY_ERROR, MISSING_APP_IDENTIFIER_MESSAGE, MISSING_VERSION_NUMBER_MESSAGE
from .ipa_uploader import IpaUploader

log = logging.getLogger(__name__)


class ValKey(Enum):
    APP_IDENTIFIER = 'app_identifier'
    APPLE_ID = 'apple_id'
    APP_VERSION = 'version'
    IPA = 'ipa'
    DESCRIPTION = 'description'
    TITLE = 'title'
    CHANGELOG = 'changelog'
    SUPPORT_URL = 'support_url'
    PRIVACY_URL = 'privacy_url'
    MARKETING_URL = 'marketing_url'
    KEYWORDS = 'keywords'
    SCREENSHOTS_PATH = 'screenshots_path'
    DEFAULT_LANGUAGE = 'default_language'


class AllBlocks(Enum):
    UNIT_TESTS = 'unit_tests'
    SUCCESS = 'success'
    ERROR = 'error'


class DeliverUnitTestsError(AppleAPIError):
    """unit_tests返回的结果不是成功"""


def unit_tests_passed(result) -> bool:
    """只有 True 或者转成整数后等于 1 才算成功"""
    if result is True:
        return True
    if result is None or result is False:
        return False
    if isinstance(result, (int, float)):
        return int(result) == 1
    match = re.match(r'\s*[-+]?\d+', str(result))
    return bool(match) and int(match.group()) == 1


class Deliverer(object):

    def __init__(self, path=None, hash:dict = None) -> None:
        """
        开始一次发布
        @param path: Deliverfile路径
        @param hash: 不使用Deliverfile时，直接传入所有的值，key见ValKey
        """
        # 当前发布的App
        self.app = None
        self.ipa = None
        self.deliver_file = None
        # Deliverfile中的所有值，执行完后才开始发布
        self.deploy_information = {}
        self.active_blocks = {}

        if hash is not None:
            for key, value in hash.items():
                # 也走set_new_value，这样key同样会被校验
                if key in self.all_available_blocks_to_set() or isinstance(key, AllBlocks):
                    self.set_new_block(key, value)
                else:
                    self.set_new_value(key, value)
            self.finished_executing_deliver_file()
        else:
            self.deliver_file = Deliverfile(self, path)

    @classmethod
    def all_available_keys_to_set(cls) -> list:
        return [key.value for key in ValKey]

    @classmethod
    def all_available_blocks_to_set(cls) -> list:
        return [key.value for key in AllBlocks]

    def set_new_value(self, key, value):
        """Deliverfile中设置一个值，key必须是ValKey中的一个"""
        try:
            key = ValKey(key)
        except ValueError:
            raise DeliverfileDSLError(INVALID_KEY_ERROR.format(key)) from None

        if self.deploy_information.get(key) is not None:
            log.warning("已经设置过 '%s'，使用新的值 '%s' 覆盖", key.value, value)

        self.deploy_information[key] = value

    def set_new_block(self, key, block):
        try:
            key = AllBlocks(key)
        except ValueError:
            raise DeliverfileDSLError(INVALID_KEY_ERROR.format(key)) from None
        if not callable(block):
            raise DeliverfileDSLError(f"'{key.value}' 需要一个函数")
        self.active_blocks[key] = block

    def finished_executing_deliver_file(self):
        """Deliverfile执行完后开始真正的发布，有error回调时所有异常都交给它处理"""
        try:
            self._deliver()
        except Exception as ex:
            error_block = self.active_blocks.get(AllBlocks.ERROR)
            if error_block is None:
                raise
            error_block(ex)

    def _deliver(self):
        info = self.deploy_information
        app_version = info.get(ValKey.APP_VERSION)
        app_identifier = info.get(ValKey.APP_IDENTIFIER)
        apple_id = info.get(ValKey.APPLE_ID)

        # ipa中可以读到bundle id和版本号，Deliverfile中也有时必须一致
        if info.get(ValKey.IPA):
            self.ipa = IpaUploader(App(), info[ValKey.IPA])

            ipa_identifier = self.ipa.fetch_app_identifier()
            if app_identifier:
                if app_identifier != ipa_identifier:
                    raise DeliverfileDSLError(f'ipa的App Identifier和设置的不一致 ({app_identifier} != {ipa_identifier})')
            else:
                app_identifier = ipa_identifier

            ipa_version = self.ipa.fetch_app_version()
            if app_version:
                if app_version != ipa_version:
                    raise DeliverfileDSLError(f'ipa的版本号和设置的不一致 ({app_version} != {ipa_version})')
            else:
                app_version = ipa_version

        if not app_identifier:
            raise DeliverfileDSLError(MISSING_APP_IDENTIFIER_MESSAGE)
        if not app_version:
            raise DeliverfileDSLError(MISSING_VERSION_NUMBER_MESSAGE)

        log.info("所有信息已获取，开始发布 '%s' 的版本 '%s'", app_identifier, app_version)

        self.app = App(app_identifier=app_identifier, apple_id=apple_id)
        self.app.metadata.verify_version(app_version)

        unit_tests = self.active_blocks.get(AllBlocks.UNIT_TESTS)
        if unit_tests is not None:
            result = unit_tests()
            if not unit_tests_passed(result):
                raise DeliverUnitTestsError(f"unit_tests失败，返回结果：'{result}'，需要返回 True 或 1")

        # 元数据只能在Deliverfile执行完后设置
        metadata = self.app.metadata
        updates = [
            (ValKey.TITLE, metadata.update_title),
            (ValKey.DESCRIPTION, metadata.update_description),
            (ValKey.SUPPORT_URL, metadata.update_support_url),
            (ValKey.CHANGELOG, metadata.update_changelog),
            (ValKey.MARKETING_URL, metadata.update_marketing_url),
            (ValKey.PRIVACY_URL, metadata.update_privacy_url),
            (ValKey.KEYWORDS, metadata.update_keywords),
        ]
        for key, update in updates:
            if info.get(key) is not None:
                update(info[key])

        self._set_screenshots()

        metadata.upload()

        # ipa需要单独上传
        if self.ipa is not None:
            self.ipa.app = self.app
            self.ipa.upload()

        success = self.active_blocks.get(AllBlocks.SUCCESS)
        if success is not None:
            success()

    def _set_screenshots(self):
        screens_path = self.deploy_information.get(ValKey.SCREENSHOTS_PATH)
        if not screens_path:
            return
        metadata = self.app.metadata
        if metadata.set_all_screenshots_from_path(screens_path):
            return
        # 目录下没有每个语言的目录
        if not isinstance(screens_path, dict):
            default_language = self.deploy_information.get(ValKey.DEFAULT_LANGUAGE)
            if not default_language:
                raise DeliverfileDSLError('截图目录下需要有每个语言的目录(例如：en-US、zh-Hans)，或者设置default_language，或者提供 语言 => 目录 的字典')
            screens_path = {default_language: screens_path}
        metadata.set_screenshots_for_each_language(screens_path)
