"""Navigator Cookie Session Meta information.
   Navigator Cookie Session attaches signed-cookie sessions to aiohttp requests.
"""
__title__ = 'navigator_cookiesession'
__description__ = (
   'Navigator Cookie Session attaches signed-cookie sessions '
   'backed by a pluggable key-value store to aiohttp requests.'
)
__version__ = '0.1.0'
__copyright__ = 'Copyright (c) 2023 Jesus Lara'
__author__ = 'Jesus Lara'
__author_email__ = 'jesuslarag@gmail.com'
__license__ = 'Apache-2.0'
__url__ = 'https://github.com/phenobarbital/navigator-session'
