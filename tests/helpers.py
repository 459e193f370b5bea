import io

from PIL import Image

from utils.image_normalizer import ImageSource


def make_image_bytes(width, height, fmt="PNG", mode="RGB", color=(200, 30, 30)):
    if mode == "RGBA":
        color = color + (128,)
    img = Image.new(mode, (width, height), color)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    img.close()
    return buf.getvalue()


def make_source(width, height, fmt="PNG", mode="RGB", content_type=None, filename=None):
    content_type = content_type or f"image/{fmt.lower()}"
    return ImageSource(
        data=make_image_bytes(width, height, fmt=fmt, mode=mode),
        content_type=content_type,
        filename=filename or f"car.{fmt.lower()}",
    )


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=None, reason="OK"):
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else ("" if body is None else repr(body))
        self.content = b"" if body is None and not text else b"x"
        self.reason = reason

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._body is None:
            raise ValueError("No JSON body")
        return self._body


class FakeSession:
    """Records requests and replays queued responses (or raises queued exceptions)."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []
        self.closed = False

    def close(self):
        self.closed = True

    def request(self, method, url, json=None, headers=None, timeout=None):
        self.calls.append({"method": method, "url": url, "json": json, "headers": headers, "timeout": timeout})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response
