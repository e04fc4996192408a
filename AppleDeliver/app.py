#!/usr/bin/python3
# coding=utf-8
# 正在发布的App

import logging

from .apple_api_agent import APIAgent, die
from .config import Credentials
from .metadata import Metadata

log = logging.getLogger(__name__)


class App(object):

    def __init__(self, app_identifier:str = None, apple_id:str = None, agent:APIAgent = None, credentials:Credentials = None) -> None:
        self.app_identifier = app_identifier
        self._apple_id = apple_id
        self._agent = agent
        self._credentials = credentials
        self._metadata = None

    @property
    def credentials(self) -> Credentials:
        if self._credentials is None:
            self._credentials = Credentials.load()
        return self._credentials

    @property
    def agent(self) -> APIAgent:
        # 只有真正访问后台时才需要密钥
        if self._agent is None:
            self._agent = APIAgent(self.credentials.token_manager())
        return self._agent

    @property
    def apple_id(self) -> str:
        """App在App Store Connect中的id，没有指定时通过bundle id查找"""
        if self._apple_id is None:
            if not self.app_identifier:
                die('没有app_identifier，无法查找apple id')
            apps = self.agent.list_apps(filters={'bundleId': self.app_identifier})
            # filter[bundleId]是前缀匹配，需要再比较一次
            apps = [app for app in apps if app.bundle_id == self.app_identifier]
            if not apps:
                die(f'通过Bundle id：{self.app_identifier}未找到apple id')
            self._apple_id = apps[0].id
            log.info('apple id: %s', self._apple_id)
        return self._apple_id

    @property
    def metadata(self) -> Metadata:
        if self._metadata is None:
            self._metadata = Metadata(self)
        return self._metadata

    def __repr__(self) -> str:
        return f'App({self.app_identifier}, {self._apple_id})'
