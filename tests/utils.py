import re

CODE_PATTERN = re.compile(r'<div class="code">(\d{6})</div>')


def extract_code(html: str) -> str:
    match = CODE_PATTERN.search(html)
    assert match, "no verification code in email body"
    return match.group(1)
