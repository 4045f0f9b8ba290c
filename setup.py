from setuptools import setup, find_packages

VERSION = open("postbase/VERSION").read().strip()

reqs = open("requirements.txt").read().strip().split("\n")

test_reqs = open("requirements-test.txt").read().strip().split("\n")

setup(
    name="postbase",
    version=VERSION,
    packages=find_packages(exclude=["tests.*", "tests"]),
    include_package_data=True,
    package_data={"postbase": ["py.typed", "VERSION", "templates/*.html"]},
    zip_safe=False,
    install_requires=reqs,
    extras_require={"tests": test_reqs},
    entry_points={
        "console_scripts": [
            "postbase-build=postbase.cli:build_cli",
            "postbase-check=postbase.cli:check_cli",
            "postbase-config=postbase.cli:config_cli",
            "postbase-serve=postbase.cli:serve_cli",
        ]
    },
)
