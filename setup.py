"""
fleetscaler 项目构建配置

Single-tick autoscaler that sizes Spot Fleet requests to pending CI jobs.
"""

from setuptools import setup, find_packages
import os

# 读取 README 文件
def read_readme():
    with open("README.md", "r", encoding="utf-8") as fh:
        return fh.read()

# 读取版本信息
def read_version():
    with open("fleetscaler/__init__.py", "r", encoding="utf-8") as fh:
        for line in fh:
            if line.startswith("__version__"):
                return line.split("=")[1].strip().strip('"').strip("'")
    return "0.1.0"

# 读取依赖文件
def read_requirements():
    requirements = []
    if os.path.exists("requirements.txt"):
        with open("requirements.txt", "r", encoding="utf-8") as fh:
            requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]
    return requirements

# 读取开发依赖
def read_dev_requirements():
    dev_requirements = []
    if os.path.exists("requirements-dev.txt"):
        with open("requirements-dev.txt", "r", encoding="utf-8") as fh:
            dev_requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]
    return dev_requirements

setup(
    name="fleetscaler",
    version=read_version(),
    author="fleetscaler maintainers",
    description="CI 弹性机群自动扩缩容 - fleetscaler",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*", "examples", "examples.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Intended Audience :: System Administrators",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Build Tools",
        "Topic :: System :: Distributed Computing",
    ],
    python_requires=">=3.10",
    install_requires=read_requirements(),
    extras_require={
        "dev": read_dev_requirements(),
    },
    entry_points={
        "console_scripts": [
            "fleetscaler=fleetscaler.cli:main",
        ],
        "fleetscaler.matching": [
            "first_fit=fleetscaler.core.matching.strategy:FirstFitStrategy",
        ],
    },
    include_package_data=True,
    package_data={
        "fleetscaler": [
            "config/*.yaml",
        ],
    },
    zip_safe=False,
    keywords=[
        "autoscaling",
        "buildkite",
        "spot-fleet",
        "aws",
        "ci",
    ],
)
