#!/usr/bin/python3
# coding=utf-8
# 通过Deliverfile发布App到App Store Connect

from .apple_api_agent import AppleAPIError, APIAgent, TokenManager
from .app import App
from .config import Credentials
from .deliverer import AllBlocks, DeliverUnitTestsError, Deliverer, ValKey
from .deliverfile import Deliverfile, DeliverfileDSLError
from .ipa_uploader import IpaUploadError, IpaUploader
from .metadata import Metadata

__version__ = '1.0.0'
