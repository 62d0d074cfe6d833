"""Shared fixtures and page builders for the adfs-aws tests."""

import base64
import datetime

from botocore.exceptions import ClientError

DIRECTORY_DOMAIN = "https://sts.example.com"
ENTRY_URL = (
    "https://sts.example.com/adfs/ls/IdpInitiatedSignOn.aspx"
    "?loginToRp=urn:amazon:webservices"
)
PRINCIPAL = "arn:aws:iam::123456789012:saml-provider/ADFS"

ROLE_VALUE = (
    '<saml:AttributeValue xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance" '
    'xsi:type="xs:string">{}</saml:AttributeValue>'
)


def create_assertion(*role_values):
    """Return a base64 SAML response carrying *role_values* as Role attribute values."""
    values = "".join(ROLE_VALUE.format(v) for v in role_values)
    xml = (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<samlp:Response xmlns:samlp="urn:oasis:names:tc:SAML:2.0:protocol">'
        '<saml:Assertion xmlns:saml="urn:oasis:names:tc:SAML:2.0:assertion">'
        '<saml:Subject><saml:NameID>CORP\\alice</saml:NameID></saml:Subject>'
        '<saml:AttributeStatement>'
        '<saml:Attribute Name="https://aws.amazon.com/SAML/Attributes/RoleSessionName">'
        '<saml:AttributeValue>alice@example.com</saml:AttributeValue>'
        '</saml:Attribute>'
        '<saml:Attribute Name="https://aws.amazon.com/SAML/Attributes/Role">'
        f'{values}'
        '</saml:Attribute>'
        '</saml:AttributeStatement>'
        '</saml:Assertion>'
        '</samlp:Response>'
    )
    return base64.b64encode(xml.encode("utf-8")).decode("ascii")


def login_form_page(action):
    return f"""<!DOCTYPE html>
<html><head><title>Sign In</title>
<script>var x = 1 < 2 && "<form>";</script>
</head>
<body>
<div id="content"><p>Welcome<br>
<form method="post" id="loginForm" autocomplete="off" novalidate="novalidate" action="{action}">
<input id="userNameInput" name="UserName" type="email" value="" >
<input id="passwordInput" name="Password" type="password">
<span id="submitButton" class="submit">Sign in</span>
</form>
<div id="error" class="fieldMargin error smallText">
<span id="errorText" for=""></span>
</div>
</body></html>
"""


def assertion_page(assertion):
    return f"""<html><head><title>Working...</title></head>
<body><form method="POST" name="hiddenform" action="https://signin.aws.amazon.com:443/saml">
<input type="hidden" name="SAMLResponse" value="{assertion}" />
<noscript><p>Script is disabled. Click Submit to continue.</p><input type="submit" value="Submit" /></noscript>
</form><script language="javascript">window.setTimeout('document.forms[0].submit()', 0);</script></body></html>
"""


def error_page(message):
    return f"""<html><body>
<form method="post" id="loginForm" action="/adfs/ls/?SAMLRequest=abc">
<div id="error" class="fieldMargin error smallText">
<span id="errorText" for="">{message}</span>
</div>
</form></body></html>
"""


def sts_credentials(role_arn):
    return {
        "Credentials": {
            "AccessKeyId": f"AKIA{role_arn[-5:].upper()}",
            "SecretAccessKey": "secret",
            "SessionToken": "token",
            "Expiration": datetime.datetime(2026, 10, 19, 12, 0, tzinfo=datetime.timezone.utc),
        }
    }


def access_denied():
    return ClientError(
        {"Error": {"Code": "AccessDenied", "Message": "Not authorized to perform sts:AssumeRoleWithSAML"}},
        "AssumeRoleWithSAML",
    )


class FakeSts:
    """Stands in for a boto3 STS client; refuses roles listed in *denied*."""

    def __init__(self, denied=()):
        self.denied = set(denied)
        self.calls = []

    def assume_role_with_saml(self, **params):
        self.calls.append(params)
        if params["RoleArn"] in self.denied:
            raise access_denied()
        return sts_credentials(params["RoleArn"])
