from setuptools import setup, find_packages

setup(
    name="demolsp",
    version="0.1.0",
    description="Minimal language server: naive symbol index, hover, definition, references and rename",
    packages=find_packages(include=["demolsp", "demolsp.*"]),
    python_requires=">=3.11",
    install_requires=[
        "click>=8.0",
        "pydantic>=2.0",
        "tomli>=2.0",
        "tomli-w>=1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "demolsp=demolsp.cli:cli",
            "demolsp-server=demolsp.server_cli:main",
        ],
    },
)
