[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nebulastore"
version = "2.0.0"
description = "Metadata and namespace layer for a file store: inodes, directory entries, slice layouts, inode-range partitions and storage-backend interfaces"
requires-python = ">=3.10"
dependencies = []
keywords = ["storage", "filesystem", "metadata", "inode", "dentry", "slice", "s3", "raft"]
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
    "Topic :: System :: Filesystems",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["nebulastore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
