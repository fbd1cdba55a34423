"""
Provides project-level commands. Commands are run via `python setup.py <command> [args]`

Commands available:

- apidoc: regenerate reST docs for inline pydoc comments
- autobuild: watch for changes to the reST files and rebuild the documentation, refreshing
   the browser.
"""

from setuptools import setup, Command

import os


class RunInRootCommand(Command):
    user_options = []

    def initialize_options(self):
        self.cwd = None

    def finalize_options(self):
        self.cwd = os.getcwd()

    def run(self):
        assert os.getcwd() == self.cwd, 'Must be in package root: %s' % self.cwd
        self.runcmd()

    def runcmd(self):
        pass


class ApiDocCommand(RunInRootCommand):
    description = "regenerates the API docs for the steamcondenser package"

    def runcmd(self):
        os.system('"sphinx-apidoc" -f -e -o docs/apidoc src/steamcondenser')


class AutoBuildCommand(RunInRootCommand):
    description = "watches the docs for changes and rebuilds them, automatically refreshing the browser page"

    def runcmd(self):
        os.system("sphinx-autobuild docs docs/_build/html -B")


setup(
    name='steam-condenser-py',
    version='0.0.1',
    description='Steam Community ids and the UDP transport for querying Source and GoldSrc game servers.',
    url='',
    author='',
    author_email='',
    license='BSD',
    package_dir={'': 'src'},
    packages=['steamcondenser', 'steamcondenser.community', 'steamcondenser.config',
              'steamcondenser.protocol', 'steamcondenser.support', 'steamcondenser.transport'],
    package_data={'steamcondenser.config': ['*.cfg']},
    install_requires=[
        'configobj>=5.0.9',
        'requests',
    ],
    extras_require={
        'test': ['pytest', 'PyHamcrest', 'timeout-decorator'],
    },
    zip_safe=False,
    cmdclass={
        'apidoc': ApiDocCommand,
        'autobuild': AutoBuildCommand
    }
)
