from .login import NEED_TOKEN, SUCCESS, fetch_tokens, login, logout
