"""kitty-test-harness lives at <https://github.com/kitty-harness/kitty-test-harness>.

kitty-test-harness
------------------

Drive kitty terminal windows over remote control for integration tests.

"""
from setuptools import find_packages, setup

about = {}
with open("src/kitty_harness/__about__.py") as fp:
    exec(fp.read(), about)

with open('requirements/base.txt') as f:
    install_reqs = [line for line in f.read().split('\n') if line]

with open('requirements/test.txt') as f:
    tests_reqs = [line for line in f.read().split('\n') if line]

readme = open('README.md', encoding='utf-8').read()

history = open('CHANGES', encoding='utf-8').read().replace('.. :changelog:', '')


setup(
    name=about['__title__'],
    version=about['__version__'],
    url=about['__github__'],
    download_url=about['__pypi__'],
    project_urls={
        'Documentation': about['__docs__'],
        'Code': about['__github__'],
        'Issue tracker': about['__tracker__'],
    },
    license=about['__license__'],
    author=about['__author__'],
    author_email=about['__email__'],
    description=about['__description__'],
    long_description=readme,
    long_description_content_type="text/markdown",
    package_dir={'': 'src'},
    packages=find_packages('src'),
    include_package_data=True,
    python_requires='>=3.9',
    install_requires=install_reqs,
    tests_require=tests_reqs,
    extras_require={
        'test': tests_reqs,
        'otel': [
            'opentelemetry-api',
            'opentelemetry-sdk',
            'opentelemetry-exporter-otlp-proto-http',
        ],
    },
    entry_points={
        'pytest11': [
            'kitty_harness = kitty_harness.pytest_plugin',
            'kitty_harness_snapshot = kitty_harness.snapshot',
        ],
    },
    zip_safe=False,
    keywords=about['__title__'],
    classifiers=[
        "Development Status :: 4 - Beta",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX",
        "Operating System :: POSIX :: Linux",
        "Framework :: Pytest",
        "Intended Audience :: Developers",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Testing",
        "Topic :: Terminals :: Terminal Emulators/X Terminals",
    ],
)
