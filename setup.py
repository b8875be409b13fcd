from setuptools import find_namespace_packages, setup

setup(
    name="threadpatch",
    version="0.1.0",
    description="Merge and render unified diffs resent across mailing-list threads",
    packages=find_namespace_packages(include=["threadpatch", "threadpatch.*"]),
    include_package_data=True,
    python_requires=">=3.11",
    install_requires=[
        "pydantic>=2.0",
        "PyYAML>=6.0",
        "unidiff>=0.7.4",
    ],
    extras_require={
        "ui": ["fastapi>=0.100", "uvicorn>=0.23"],
        "test": ["pytest>=7.0", "fastapi>=0.100", "httpx>=0.24"],
    },
    entry_points={"console_scripts": ["threadpatch=threadpatch.cli:main"]},
)
