"""
redis-scripts - named Redis Lua scripts with EVALSHA and NOSCRIPT fallback
"""
from setuptools import find_packages, setup

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="redis-scripts",
    version="0.1.0",
    description="Run Redis Lua scripts by name, loading them into the script cache on demand",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["core", "core.*", "redis_scripts", "redis_scripts.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Database",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "test": [
            "pytest>=7.4",
            "fakeredis[lua]>=2.20",
        ],
    },
    entry_points={
        "console_scripts": [
            "redis-scripts=core.cli:main",
        ],
    },
)
