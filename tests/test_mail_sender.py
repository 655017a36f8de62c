import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from mail_sender import OutboundEmail, ResendMailSender


def _message() -> OutboundEmail:
    return OutboundEmail(
        from_="Form <form@example.com>",
        to=["owner@example.com"],
        reply_to="jo@x.com",
        subject="New inquiry from Jo - Java development",
        html="<p>hi</p>",
        text="hi",
    )


def _patched_session(status: int, body: str):
    response = MagicMock()
    response.status = status
    response.text = AsyncMock(return_value=body)

    session = MagicMock()
    session.post.return_value.__aenter__.return_value = response

    client_session = patch("mail_sender.aiohttp.ClientSession")
    return client_session, session


class ResendMailSenderTests(unittest.IsolatedAsyncioTestCase):
    async def test_posts_payload_with_bearer_token(self) -> None:
        client_session, session = _patched_session(200, '{"id": "abc"}')
        with client_session as session_cls:
            session_cls.return_value.__aenter__.return_value = session
            sender = ResendMailSender("secret", "https://mail.test/emails")
            result = await sender.send(_message())

        self.assertTrue(result.ok)
        self.assertEqual(result.status, 200)
        self.assertEqual(result.body, '{"id": "abc"}')

        session.post.assert_called_once()
        args, kwargs = session.post.call_args
        self.assertEqual(args[0], "https://mail.test/emails")
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer secret")
        self.assertEqual(kwargs["json"]["from"], "Form <form@example.com>")
        self.assertEqual(kwargs["json"]["to"], ["owner@example.com"])
        self.assertEqual(kwargs["json"]["reply_to"], "jo@x.com")

    async def test_error_status_is_reported_not_raised(self) -> None:
        client_session, session = _patched_session(422, '{"message": "invalid from"}')
        with client_session as session_cls:
            session_cls.return_value.__aenter__.return_value = session
            result = await ResendMailSender("secret", "https://mail.test/emails").send(
                _message()
            )

        self.assertFalse(result.ok)
        self.assertEqual(result.status, 422)
        self.assertIn("invalid from", result.body)


if __name__ == "__main__":
    unittest.main()
