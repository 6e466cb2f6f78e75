# -*- coding: utf-8 -*-

# system imports
from setuptools import setup, find_packages  # type: ignore


# proceed with actual install
install_requires = [
    "click>=8.0.0",
    "dbus-next>=0.2.2;sys_platform=='linux'",
    "packaging",
    "rubicon-objc>=0.4.1;sys_platform=='darwin'",
    "typing_extensions",
]

syslog_requires = ["systemd-python"]

dev_requires = [
    "black",
    "flake8",
    "mypy",
    "pytest",
    "pytest-cov",
]

setup(
    name="linkwatch",
    author="Sam Schott",
    author_email="sam.schott@outlook.com",
    version="1.0.0",
    description="Network connectivity monitor for macOS and Linux.",
    license="MIT",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    packages=find_packages("src"),
    package_dir={"": "src"},
    install_requires=install_requires,
    extras_require={
        "syslog": syslog_requires,
        "dev": dev_requires,
    },
    zip_safe=False,
    entry_points={
        "console_scripts": ["linkwatch=linkwatch.cli:main"],
    },
    python_requires=">=3.10",
    classifiers=[
        "License :: OSI Approved :: MIT License",
        "Operating System :: Unix",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3 :: Only",
    ],
)
