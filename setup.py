from setuptools import setup

setup(
    name='ircwire',
    version='0.3.0',
    packages=[
        'ircwire',
        'ircwire.utils'
    ],
    python_requires='>=3.10',
    install_requires=[],
    extras_require={
        'docs': 'sphinx_rtd_theme',                  # the Sphinx theme we use
        'tests': ['pytest', 'pytest-asyncio'],       # collect and run tests
        'coverage': 'pytest-cov'                     # get test case coverage
    },
    entry_points={
        'console_scripts': [
            'ircwire = ircwire.utils.run:main',
            'ircwire-irccat = ircwire.utils.irccat:main'
        ]
    },

    author='ircwire contributors',
    keywords='irc client library asyncio python3',
    description='A small asyncio IRC client: line parser, event hub and self-healing sessions.',
    license='BSD',

    zip_safe=True,
    test_suite='tests'
)
