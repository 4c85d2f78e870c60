"""
Sample emails and model replies for Phish-Lens tests.
"""

PLAIN_EML = """From: "GitHub Security" <security@github.com>
To: developer@example.com
Subject: Password Reset Confirmation
Date: Fri, 28 Sep 2025 14:22:33 +0000
Content-Type: text/plain; charset="utf-8"

Hi developer,

Your password has been successfully reset for your GitHub account.

Thanks,
GitHub Security Team
"""

PHISHING_HTML_EML = """From: PayPal Support <support@paypa1-secure.tk>
To: victim@example.com
Subject: =?utf-8?q?URGENT=3A_Account_Suspended?=
MIME-Version: 1.0
Content-Type: multipart/mixed; boundary="XYZ"

--XYZ
Content-Type: text/html; charset="utf-8"

<html><head><style>p {color: red;}</style></head>
<body><p>Your account has been <b>suspended</b>.</p>
<p>Verify your password within 24 hours: <a href="http://paypa1-secure.tk/login">Login</a></p>
<script>alert(1)</script></body></html>

--XYZ
Content-Type: application/zip
Content-Disposition: attachment; filename="invoice.zip"
Content-Transfer-Encoding: base64

UEsDBAoAAAAAAA==

--XYZ--
"""

NO_BODY_EML = """From: someone@example.com
Subject: Scanned document
MIME-Version: 1.0
Content-Type: multipart/mixed; boundary="B"

--B
Content-Type: application/pdf
Content-Disposition: attachment; filename="scan.pdf"
Content-Transfer-Encoding: base64

JVBERi0xLjQK

--B--
"""

HIGH_RISK_REPLY = '```json\n{"confidence": 85, "elements": ["Spoofed sender domain", "Urgent account threat"], "reasoning": "Impersonates PayPal from a look-alike domain."}\n```'

LOW_RISK_REPLY = '{"confidence": 20, "elements": [], "reasoning": "No suspicious elements found"}'

MISSING_FIELD_REPLY = '{"confidence": 60, "reasoning": "Missing the elements list"}'

NOT_JSON_REPLY = "I think this email looks fine, nothing to worry about."
