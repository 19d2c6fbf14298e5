from setuptools import setup, find_packages

try:
    with open("README.md", "r", encoding="utf-8") as fh:
        long_description = fh.read()
except FileNotFoundError:
    long_description = "Channel relay that answers trigger commands and summarizes linked pages"

try:
    with open("requirements.txt", "r", encoding="utf-8") as fh:
        requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]
except FileNotFoundError:
    requirements = [
        "openai>=1.0.0",
        "python-dotenv>=1.0.0",
        "tiktoken>=0.5.0",
        "aiohttp>=3.8.0",
        "readability-lxml>=0.8.1",
        "slack_sdk>=3.19.0",
    ]

setup(
    name="relaybot",
    version="1.0.0",
    author="RelayBot Team",
    author_email="team@relaybot.example.com",
    description="Channel relay that answers trigger commands and summarizes linked pages",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "test": [
            "pytest>=7.0",
            "httpx>=0.23.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "relaybot=relaybot.main:main",
        ],
    },
    include_package_data=True,
    package_data={
        "": ["*.md", "*.env.example"],
    },
)
