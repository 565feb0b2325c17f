"""
Unit tests for SMS/email dispatch.
"""

import smtplib
import unittest
from unittest.mock import patch, MagicMock
import sys
import os

import requests

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from config import Settings
from notifications import (
    NotificationError,
    send_sms,
    send_email,
    dispatch_results,
    send_welcome_sms,
)

TWILIO = dict(
    twilio_account_sid="AC123",
    twilio_auth_token="secret",
    twilio_phone_number="+15550000000",
)


class TestSendSms(unittest.TestCase):

    def setUp(self):
        self.settings = Settings(**TWILIO)

    def test_not_configured(self):
        with self.assertRaises(NotificationError):
            send_sms(Settings(), "+15551112222", "hi")

    @patch('notifications.requests.post')
    def test_sms_request(self, mock_post):
        mock_post.return_value = MagicMock(status_code=201)
        mock_post.return_value.json.return_value = {"sid": "SM1"}

        sid = send_sms(self.settings, "+15551112222", "hello")

        self.assertEqual(sid, "SM1")
        url = mock_post.call_args[0][0]
        self.assertEqual(url, "https://api.twilio.com/2010-04-01/Accounts/AC123/Messages.json")
        kwargs = mock_post.call_args[1]
        self.assertEqual(kwargs["data"], {"To": "+15551112222", "From": "+15550000000", "Body": "hello"})
        self.assertEqual(kwargs["auth"], ("AC123", "secret"))

    @patch('notifications.requests.post')
    def test_https_media_is_attached(self, mock_post):
        mock_post.return_value = MagicMock(status_code=201)
        send_sms(self.settings, "+1", "pick", media_url="https://img.example/p.jpg")
        self.assertEqual(mock_post.call_args[1]["data"]["MediaUrl"], "https://img.example/p.jpg")

    @patch('notifications.requests.post')
    def test_plain_http_media_is_dropped(self, mock_post):
        mock_post.return_value = MagicMock(status_code=201)
        send_sms(self.settings, "+1", "pick", media_url="http://img.example/p.jpg")
        self.assertNotIn("MediaUrl", mock_post.call_args[1]["data"])

    @patch('notifications.requests.post')
    def test_rejected_message(self, mock_post):
        mock_post.return_value = MagicMock(status_code=400)
        mock_post.return_value.json.return_value = {"message": "Invalid 'To' Phone Number"}
        with self.assertRaises(NotificationError) as ctx:
            send_sms(self.settings, "nope", "hi")
        self.assertIn("Invalid 'To' Phone Number", str(ctx.exception))

    @patch('notifications.requests.post')
    def test_network_error(self, mock_post):
        mock_post.side_effect = requests.ConnectionError("down")
        with self.assertRaises(NotificationError):
            send_sms(self.settings, "+1", "hi")


class TestSendEmail(unittest.TestCase):

    def setUp(self):
        self.settings = Settings(smtp_host="smtp.example.com", smtp_port=2525,
                                 smtp_user="club@example.com", smtp_pass="pw")

    def test_not_configured(self):
        with self.assertRaises(NotificationError):
            send_email(Settings(), "a@example.com", "s", "t")

    @patch('notifications.smtplib.SMTP')
    def test_email_with_attachment(self, mock_smtp):
        smtp = mock_smtp.return_value.__enter__.return_value

        send_email(self.settings, "a@example.com", "Subject", "Body", attachment=b"\x89PNG")

        mock_smtp.assert_called_once_with("smtp.example.com", 2525, timeout=30)
        smtp.starttls.assert_called_once()
        smtp.login.assert_called_once_with("club@example.com", "pw")
        msg = smtp.send_message.call_args[0][0]
        self.assertEqual(msg["To"], "a@example.com")
        self.assertEqual(msg["From"], "club@example.com")
        attachments = list(msg.iter_attachments())
        self.assertEqual(len(attachments), 1)
        self.assertEqual(attachments[0].get_filename(), "result.png")

    @patch('notifications.smtplib.SMTP')
    def test_smtp_failure(self, mock_smtp):
        smtp = mock_smtp.return_value.__enter__.return_value
        smtp.send_message.side_effect = smtplib.SMTPRecipientsRefused({})
        with self.assertRaises(NotificationError):
            send_email(self.settings, "a@example.com", "s", "t")

    @patch('notifications.smtplib.SMTP')
    def test_newline_in_address_is_rejected(self, mock_smtp):
        with self.assertRaises(NotificationError):
            send_email(self.settings, "a@example.com\nBcc: x@example.org", "s", "t")
        mock_smtp.assert_not_called()


class TestDispatchResults(unittest.TestCase):

    def setUp(self):
        self.settings = Settings()

    @patch('notifications.send_sms')
    @patch('notifications.send_email')
    def test_routes_by_contact_type(self, mock_email, mock_sms):
        results = dispatch_results(self.settings, ["a@example.com", "+15551112222"], b"png",
                                   "https://img.example/p.jpg")
        self.assertEqual(results, [
            {"contact": "a@example.com", "status": "email sent"},
            {"contact": "+15551112222", "status": "sms sent"},
        ])
        self.assertEqual(mock_email.call_args[1]["attachment"], b"png")
        mock_sms.assert_called_once_with(self.settings, "+15551112222", "Check out our movie pick:",
                                         media_url="https://img.example/p.jpg")

    @patch('notifications.send_sms')
    @patch('notifications.send_email')
    def test_failures_do_not_stop_fanout(self, mock_email, mock_sms):
        mock_email.side_effect = NotificationError("SMTP is not configured")
        results = dispatch_results(self.settings, ["a@example.com", "+1"], b"png")
        self.assertEqual(results[0], {"contact": "a@example.com", "status": "error",
                                      "error": "SMTP is not configured"})
        self.assertEqual(results[1]["status"], "sms sent")

    @patch('notifications.smtplib.SMTP')
    @patch('notifications.send_sms')
    def test_malformed_address_does_not_stop_fanout(self, mock_sms, mock_smtp):
        settings = Settings(smtp_host="smtp.example.com")
        results = dispatch_results(settings, ["a@example.com\nBcc: x@example.org", "+15551112222"], b"png")
        self.assertEqual(results[0]["status"], "error")
        self.assertEqual(results[1], {"contact": "+15551112222", "status": "sms sent"})
        mock_sms.assert_called_once()
        mock_smtp.assert_not_called()

    def test_no_contacts(self):
        self.assertEqual(dispatch_results(self.settings, [], b""), [])


class TestWelcomeSms(unittest.TestCase):

    @patch('notifications.send_sms')
    def test_welcome_text(self, mock_sms):
        self.assertTrue(send_welcome_sms(Settings(), "Ann", "+1"))
        body = mock_sms.call_args[0][2]
        self.assertTrue(body.startswith("Hi Ann, thanks for joining the Puddy Pictures Movie Club!"))

    @patch('notifications.send_sms')
    def test_failure_is_swallowed(self, mock_sms):
        mock_sms.side_effect = NotificationError("Twilio is not configured")
        self.assertFalse(send_welcome_sms(Settings(), "Ann", "+1"))


if __name__ == '__main__':
    unittest.main()
