#!/usr/bin/env python
# _*_ coding:UTF-8 _*_
"""
__author__ = '影孤清'
"""

from pathlib import Path

from setuptools import find_packages
from setuptools import setup

README = Path(__file__).resolve().with_name("README.md").read_text()

setup(
    name='AppleDeliver',  # 包名字
    version='1.0.0',  # 包版本
    author='影孤清',  # 作者
    author_email='yingguqing@163.com',  # 作者邮箱
    keywords='ios apple appstore app store connect deliver deliverfile ipa metadata screenshots',
    description='Deliver App metadata, screenshots and ipa to App Store Connect',  # 简单描述
    long_description=README,
    long_description_content_type='text/markdown',
    url='https://github.com/yingguqing/AppleDeliver',  # 包的主页
    packages=find_packages(exclude=['tests', 'tests.*']),  # 包
    install_requires=['PyJWT[crypto]~=2.0', 'requests~=2.20'],
    extras_require={'test': ['pytest>=7.0']},
    entry_points={'console_scripts': ['apple-deliver = AppleDeliver.cli:main']},
    python_requires="~=3.8",
    classifiers=[
        "Development Status :: 4 - Beta",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
