import os.path

import setuptools

root_dir = os.path.abspath(os.path.dirname(__file__))
readme_file = os.path.join(root_dir, "README.rst")
with open(readme_file, encoding="utf-8") as f:
    long_description = f.read()

install_requires = [
    "aioice>=0.10.1,<0.11.0",
    "lxml>=4.9",
]

setuptools.setup(
    name="sdpjingle",
    version="0.1.0",
    description="Translation between SDP session descriptions and Jingle stanzas",
    long_description=long_description,
    long_description_content_type="text/x-rst",
    license="BSD",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Environment :: Web Environment",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: BSD License",
        "Operating System :: OS Independent",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    package_dir={"": "src"},
    packages=["sdpjingle"],
    python_requires=">=3.9",
    install_requires=install_requires,
    extras_require={
        "dev": [
            "coverage[toml]>=7.2.2",
            "ruff",
        ],
    },
)
