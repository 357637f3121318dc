import re

import setuptools

# Read the version without importing pywwcp (its dependencies are not installed yet)
with open("pywwcp/__init__.py", "r") as fh:
    __version__ = "%s.%s.%s" % re.search(r"version_tuple = \((\d+), (\d+), (\d+)\)", fh.read()).groups()

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="pywwcp",
    version=__version__,
    author="pyWWCP Contributors",
    description="Python module to project a WWCP e-mobility roaming network as JSON with expand/include directives",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(exclude=["*.tests", "*.tests.*"]),
    install_requires=[
        'requests',
        'python-dotenv',
        'python-dateutil',
        'pydantic>=2.0',
        'pydantic-settings>=2.0',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': ['pywwcp=pywwcp.__main__:main'],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
