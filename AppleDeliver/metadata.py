#!/usr/bin/python3
# coding=utf-8
# App元数据：先暂存所有修改，upload时一次性提交到App Store Connect

import logging
import re
from pathlib import Path
from typing import Dict, List

from .apple_api_agent import die
from .models import *

log = logging.getLogger(__name__)

IMAGE_SUFFIXES = ['.png', '.jpg', '.jpeg']

# 语言目录名，例如：en-US、zh-Hans、de-DE、ja
LANGUAGE_PATTERN = re.compile(r'^[a-z]{2,3}(-[A-Za-z0-9]+)*$')


class Metadata(object):

    def __init__(self, app) -> None:
        self.app = app
        self.version = None
        # {语言: {字段: 内容}}
        self.version_changes = {}
        self.info_changes = {}
        # {语言: {ScreenshotDisplayType: [图片路径]}}
        self.screenshots = {}

    @property
    def agent(self):
        return self.app.agent

    def verify_version(self, version:str) -> AppStoreVersion:
        """
        确认后台存在要发布的版本，不存在就创建
        @param version: 版本号，例如：1.0.1
        """
        versions = self.agent.list_appstore_version(self.app.apple_id, filters={'versionString': version, 'platform': Platform.IOS.value})
        versions = [item for item in versions if item.version_string == version]
        if versions:
            self.version = versions[0]
            log.info('找到版本 %s (%s)', version, self.version.attributes.app_store_state)
        else:
            log.info('版本 %s 不存在，准备创建', version)
            self.version = self.agent.create_appstore_version(self.app.apple_id, version, Platform.IOS)
        return self.version

    def _stage(self, changes:dict, field:str, values:dict, name:str):
        if not isinstance(values, dict):
            die(f'{name}必须是 语言 => 内容 的字典，例如：{{"en-US": "..."}}')
        for language, value in values.items():
            changes.setdefault(language, {})[field] = value

    # 版本信息

    def update_description(self, description:Dict[str, str]):
        self._stage(self.version_changes, 'description', description, 'description')

    def update_changelog(self, changelog:Dict[str, str]):
        self._stage(self.version_changes, 'whatsNew', changelog, 'changelog')

    def update_support_url(self, support_url:Dict[str, str]):
        self._stage(self.version_changes, 'supportUrl', support_url, 'support_url')

    def update_marketing_url(self, marketing_url:Dict[str, str]):
        self._stage(self.version_changes, 'marketingUrl', marketing_url, 'marketing_url')

    def update_keywords(self, keywords:dict):
        """
        @param keywords: {语言: 关键词}，关键词可以是列表，也可以是逗号分隔的字符串
        """
        if isinstance(keywords, dict):
            keywords = {
                language: ','.join(words) if isinstance(words, (list, tuple)) else words
                for language, words in keywords.items()
            }
        self._stage(self.version_changes, 'keywords', keywords, 'keywords')

    # App信息

    def update_title(self, title:Dict[str, str]):
        self._stage(self.info_changes, 'name', title, 'title')

    def update_privacy_url(self, privacy_url:Dict[str, str]):
        self._stage(self.info_changes, 'privacyPolicyUrl', privacy_url, 'privacy_url')

    # 截图

    def set_all_screenshots_from_path(self, path) -> bool:
        """
        path下是每个语言的目录时(en-US、zh-Hans...)，使用所有语言目录
        语言目录中至少要有一个尺寸目录，其他目录(例如：raw)会被忽略
        @return: path下没有语言目录时返回False
        """
        if not isinstance(path, (str, Path)):
            return False
        path = Path(path).expanduser()
        if not path.is_dir():
            return False
        languages = {item.name: item for item in sorted(path.iterdir()) if self._is_language_dir(item)}
        if not languages:
            return False
        self.set_screenshots_for_each_language(languages)
        return True

    @staticmethod
    def _is_language_dir(dir:Path) -> bool:
        if not dir.is_dir() or not LANGUAGE_PATTERN.match(dir.name):
            return False
        return any(item.is_dir() and item.name.upper() in ScreenshotDisplayType.__members__ for item in dir.iterdir())

    def set_screenshots_for_each_language(self, paths:dict):
        """
        @param paths: {语言: 截图目录}，截图目录下是每个尺寸的目录，格式：
        {
            'zh-Hans' : 'screenshots/zh-Hans'
        }
        screenshots/zh-Hans/APP_IPHONE_67/1.png
        screenshots/zh-Hans/APP_IPAD_PRO_129/1.png
        """
        if not isinstance(paths, dict):
            die('截图必须是 语言 => 目录 的字典')
        for language, dir in paths.items():
            dir = Path(dir).expanduser()
            if not dir.is_dir():
                die(f'{language}语言下截图目录 {dir} 不存在')
            type_dic = {}
            for type_dir in sorted(dir.iterdir()):
                if not type_dir.is_dir():
                    continue
                try:
                    screenshot_type = ScreenshotDisplayType[type_dir.name.upper()]
                except KeyError:
                    die(f'截图类型{type_dir.name}不存在')
                type_dic[screenshot_type] = self._images(type_dir)
            if not type_dic:
                die(f'{language}语言下截图目录 {dir} 中没有尺寸目录(例如：APP_IPHONE_67)')
            self.screenshots[language] = type_dic

    @staticmethod
    def _images(dir:Path) -> List[Path]:
        return [file for file in sorted(dir.iterdir()) if file.is_file() and file.suffix.lower() in IMAGE_SUFFIXES]

    # 上传

    def upload(self) -> bool:
        """把所有暂存的修改提交到后台"""
        if self.version is None:
            die('上传前需要先调用verify_version')
        localizations = self.agent.list_localization(self.version.id)
        for language, attrs in self.version_changes.items():
            localization = self._version_localization(localizations, language)
            self.agent.modify_localization(localization.id, attrs)
            log.info('%s 版本信息已更新: %s', language, ', '.join(attrs))
        if self.info_changes:
            self._upload_app_info()
        for language, type_dic in self.screenshots.items():
            localization = self._version_localization(localizations, language)
            for screenshot_type, files in type_dic.items():
                self._upload_screenshots(localization, screenshot_type, files)
        return True

    def _version_localization(self, localizations:list, language:str) -> AppStoreVersionLocalization:
        in_locals = [item for item in localizations if item.locale.lower() == language.lower()]
        if in_locals:
            return in_locals[0]
        log.info('创建App本地化语言：%s', language)
        localization = self.agent.create_localization(self.version.id, language)
        localizations.append(localization)
        return localization

    def _upload_app_info(self):
        infos = self.agent.list_app_infos(self.app.apple_id)
        if not infos:
            die(f'{self.app.app_identifier} 没有找到App信息')
        editable = [info for info in infos if info.editable]
        info = (editable or infos)[0]
        localizations = self.agent.list_app_info_localization(info.id)
        for language, attrs in self.info_changes.items():
            in_locals = [item for item in localizations if item.locale.lower() == language.lower()]
            if in_locals:
                self.agent.modify_app_info_localization(in_locals[0].id, attrs)
            else:
                self.agent.create_app_info_localization(info.id, language, attrs)
            log.info('%s App信息已更新: %s', language, ', '.join(attrs))

    def _upload_screenshots(self, localization:AppStoreVersionLocalization, screenshot_type:ScreenshotDisplayType, files:List[Path]):
        """先清空截图集中的截图，再按文件名顺序上传"""
        sets = self.agent.list_app_screenshot_set(localization.id, filters={'screenshotDisplayType': screenshot_type.value})
        if sets:
            set_id = sets[0].id
            for item in self.agent.list_app_screenshot(set_id):
                self.agent.delete_app_screenshot(item.id)
        else:
            log.info('未找到 %s 截图集，准备创建', screenshot_type.value)
            set_id = self.agent.create_app_screenshot_set(localization.id, screenshot_type)

        for file in files:
            screenshot = self.agent.create_app_screenshot(set_id, file)
            self.agent.upload_app_screenshot(screenshot, file)
            state = self.agent.verify_app_screenshot(screenshot.id, file)
            if state == AppScreenshotState.FAILED:
                die(f'{file} 上传失败')
            log.info('%s 上传成功', file)
