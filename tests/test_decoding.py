import json
import unittest

from groq_chat.decoding import decode_error, decode_response
from groq_chat.errors import ChatAPIError, ErrorBodyDecodeError, MissingMessageError, ResponseDecodeError
from groq_chat.types import ChatChoice, Message


def make_response(choices: list[dict], **extra) -> dict:
    body = {
        "id": "chatcmpl-123",
        "object": "chat.completion",
        "created": 1694268190,
        "model": "toy-model",
        "system_fingerprint": "fp_44709d6fcb",
        "x_groq": {"id": "req_01"},
        "choices": choices,
    }
    body.update(extra)
    return body


class ChoiceUnificationTests(unittest.TestCase):
    def test_delta_and_message_decode_to_same_message(self) -> None:
        payload = {"role": "assistant", "content": "hi"}
        from_delta = ChatChoice.model_validate({"index": 0, "delta": payload})
        from_message = ChatChoice.model_validate({"index": 0, "message": payload})

        self.assertEqual(from_delta.message, Message(role="assistant", content="hi"))
        self.assertEqual(from_delta.message, from_message.message)

    def test_delta_takes_precedence(self) -> None:
        choice = ChatChoice.model_validate(
            {
                "index": 0,
                "delta": {"role": "assistant", "content": "from delta"},
                "message": {"role": "assistant", "content": "from message"},
            }
        )
        self.assertEqual(choice.message.content, "from delta")

    def test_null_delta_falls_back_to_message(self) -> None:
        choice = ChatChoice.model_validate(
            {"index": 0, "delta": None, "message": {"role": "assistant", "content": "m"}}
        )
        self.assertEqual(choice.message.content, "m")

    def test_continuation_delta_without_role(self) -> None:
        choice = ChatChoice.model_validate({"index": 0, "delta": {"content": " world"}})
        self.assertEqual(choice.message.role, "assistant")
        self.assertEqual(choice.message.content, " world")

        final = ChatChoice.model_validate({"index": 0, "delta": {}, "finish_reason": "stop"})
        self.assertIsNone(final.message.content)
        self.assertEqual(final.finish_reason, "stop")

    def test_missing_delta_and_message(self) -> None:
        body = json.dumps(make_response([{"index": 0, "finish_reason": "stop"}]))
        with self.assertRaises(MissingMessageError) as ctx:
            decode_response(body)
        self.assertIsInstance(ctx.exception, ResponseDecodeError)
        self.assertEqual(ctx.exception.raw, body)

    def test_each_choice_resolved_independently(self) -> None:
        body = make_response(
            [
                {"index": 0, "delta": {"role": "assistant", "content": "a"}},
                {"index": 1, "delta": {"content": "b"}},
            ]
        )
        response = decode_response(json.dumps(body))
        self.assertEqual([c.message.content for c in response.choices], ["a", "b"])
        self.assertEqual([c.index for c in response.choices], [0, 1])


class DecodeResponseTests(unittest.TestCase):
    def test_buffered_response_with_usage(self) -> None:
        body = make_response(
            [
                {
                    "index": 0,
                    "message": {"role": "assistant", "content": "Hello"},
                    "logprobs": None,
                    "finish_reason": "stop",
                }
            ],
            usage={
                "queue_time": 0.01,
                "prompt_tokens": 9,
                "prompt_time": 0.002,
                "completion_tokens": 12,
                "completion_time": 0.04,
                "total_tokens": 21,
                "total_time": 0.042,
            },
        )
        response = decode_response(json.dumps(body))

        self.assertEqual(response.id, "chatcmpl-123")
        self.assertEqual(response.first_message.content, "Hello")
        self.assertEqual(response.choices[0].finish_reason, "stop")
        self.assertEqual(response.usage.total_tokens, 21)
        self.assertEqual(response.usage.queue_time, 0.01)
        self.assertEqual(response.x_groq.id, "req_01")
        self.assertEqual(response.system_fingerprint, "fp_44709d6fcb")

    def test_tool_calls_survive_decoding_in_order(self) -> None:
        calls = [
            {"id": f"call_{i}", "type": "function", "function": {"name": f"fn{i}", "arguments": f'{{"n": {i}}}'}}
            for i in range(3)
        ]
        body = make_response(
            [{"index": 0, "message": {"role": "assistant", "content": None, "tool_calls": calls}, "finish_reason": "tool_calls"}]
        )
        message = decode_response(json.dumps(body)).first_message

        self.assertEqual([c.id for c in message.tool_calls], ["call_0", "call_1", "call_2"])
        self.assertEqual(message.tool_calls[2].function.name, "fn2")
        self.assertEqual(message.tool_calls[2].function.arguments, '{"n": 2}')

    def test_empty_choices_rejected(self) -> None:
        with self.assertRaises(ResponseDecodeError) as ctx:
            decode_response(json.dumps(make_response([])))
        self.assertNotIsInstance(ctx.exception, MissingMessageError)

    def test_non_json_body(self) -> None:
        with self.assertRaises(ResponseDecodeError):
            decode_response("<html>bad gateway</html>")


class DecodeErrorTests(unittest.TestCase):
    def test_structured_error(self) -> None:
        body = json.dumps(
            {"error": {"message": "bad request", "type": "invalid_request_error", "param": None, "code": None}}
        )
        error = decode_error(400, body)

        self.assertIsInstance(error, ChatAPIError)
        self.assertEqual(error.message, "bad request")
        self.assertEqual(error.type, "invalid_request_error")
        self.assertEqual(error.status_code, 400)
        self.assertIsNone(error.param)
        self.assertIsNone(error.code)

    def test_param_and_code(self) -> None:
        body = json.dumps(
            {"error": {"message": "no such model", "type": "invalid_request_error", "param": "model", "code": "model_not_found"}}
        )
        error = decode_error(404, body)
        self.assertEqual(error.param, "model")
        self.assertEqual(error.code, "model_not_found")

    def test_undecodable_error_body(self) -> None:
        with self.assertRaises(ErrorBodyDecodeError) as ctx:
            decode_error(429, "slow down")
        self.assertEqual(ctx.exception.status_code, 429)
        self.assertEqual(ctx.exception.body, "slow down")


if __name__ == "__main__":
    unittest.main()
