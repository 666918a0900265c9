[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bitpool"
version = "0.1.0"
description = "Fixed-size memory pools with a bitmap header and variable-length size prefixes"
requires-python = ">=3.10"
dependencies = []
keywords = ["allocator", "memory pool", "bitmap", "arena", "varint"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["bitpool"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
