# ksp-mail Mail key signing party signatures to their owners
# Copyright (C) 2014 Richard Mitchell
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

import os

from setuptools import find_packages
from setuptools import setup


here = os.path.abspath(os.path.dirname(__file__))


version = '0.0.1'
long_description = '\n\n'.join([
    open(os.path.join(here, f)).read() for f in [
        'README.rst',
        'CHANGELOG.rst',
    ]])
requires = [
    'pgpdump',
    'zope.interface',
    ]
tests_require = [
    'pytest',
    ]


setup(
    name='ksp-mail',
    version=version,
    description=('Mail the signatures made at a key signing party to the '
                 'owners of the signed keys'),
    long_description=long_description,
    keywords='openpgp gnupg keysigning',
    author='Richard Mitchell',
    author_email='mitch@awesomeco.de',
    license='GPL 3',
    packages=find_packages(),
    include_package_data=True,
    zip_safe=False,
    python_requires='>=3.7',
    install_requires=requires,
    tests_require=tests_require,
    extras_require={
        'test': tests_require,
    },
    entry_points="""
    [console_scripts]
    ksp-mail = kspmail.commands.main:main
    """,
)
