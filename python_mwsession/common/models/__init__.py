from .headers import Headers, HeaderItem
from .cookies import Cookie, CookieJar, parse_cookie_date
from .request import ApiRequest, RequestMethod
from .user import User
