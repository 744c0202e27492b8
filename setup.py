from setuptools import setup, find_packages
import os

install_requires = ["lark", "pydantic>=2"]

# Define optional dependencies for development
extras_require = {"dev": ["pytest"]}

setup(
    name="nuposix",
    version="0.1.0",
    packages=find_packages(where=".", exclude=["tests", "tests.*"]),
    install_requires=install_requires,
    extras_require=extras_require,
    entry_points={
        "console_scripts": [
            "nuposix = nuposix.cli:main",
        ],
    },
    include_package_data=True,
    package_data={"nuposix.parser": ["posix.lark"]},
    description="A translator from POSIX shell scripts to Nushell.",
    long_description=open("README.md").read() if os.path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    python_requires=">=3.9",
)
