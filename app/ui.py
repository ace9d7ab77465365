# Run from project root: streamlit run app/ui.py
# UI talks to backend API (POST /api/ask). Chat history lives in the browser session and is
# resubmitted in full on every turn; the backend keeps no conversation state.

import os

import requests
import streamlit as st

# Backend config
API_BASE = os.environ.get("API_BASE", "http://localhost:8000")
ASK_URL = f"{API_BASE}/api/ask"

# Empty and safety-blocked replies arrive as a 500 with {"error"}; this only covers a 200 without text
EMPTY_MESSAGE = "Could not get a valid answer from the AI. The response was empty."


def post_ask(payload: dict) -> dict:
    """POST to the backend; raise RuntimeError with the server's message on failure."""
    r = requests.post(ASK_URL, json=payload, timeout=120)
    try:
        data = r.json()
    except ValueError:
        data = {}
    if not r.ok:
        raise RuntimeError(data.get("error") or f"Request failed with status {r.status_code}")
    return data


def first_candidate(data: dict) -> dict:
    candidates = data.get("candidates") or [{}]
    return candidates[0] or {}


def reply_text(candidate: dict) -> str:
    parts = (candidate.get("content") or {}).get("parts") or []
    return "".join(p.get("text", "") for p in parts if isinstance(p, dict))


st.title("Courses Guide")
st.caption("Answers come only from the course documents in the shared Drive folder.")

mode = st.radio("Mode", ["Ask a question", "Chat"], horizontal=True, key="mode")

if mode == "Ask a question":
    question = st.text_input("Your question", key="single_question")
    if st.button("Ask", key="ask_btn"):
        if not question.strip():
            st.error("Error: Please ask a question.")
        else:
            with st.spinner("Thinking..."):
                try:
                    candidate = first_candidate(post_ask({"userQuestion": question.strip()}))
                    text = reply_text(candidate)
                    if text:
                        st.markdown(text)
                    else:
                        st.error(f"Error: {EMPTY_MESSAGE}")
                except requests.RequestException as e:
                    st.error(f"Error: Connection failed: {e}")
                except RuntimeError as e:
                    st.error(f"Error: {e}")
else:
    # Turns in Gemini shape: {"role": "user"|"model", "parts": [{"text": ...}]}
    if "chat_history" not in st.session_state:
        st.session_state.chat_history = []
    if st.button("New chat", key="new_chat"):
        st.session_state.chat_history = []
        st.rerun()

    for turn in st.session_state.chat_history:
        with st.chat_message("assistant" if turn["role"] == "model" else "user"):
            st.markdown(turn["parts"][0]["text"])

    if prompt := st.chat_input("Ask about the course"):
        history = st.session_state.chat_history + [{"role": "user", "parts": [{"text": prompt}]}]
        with st.chat_message("user"):
            st.markdown(prompt)
        with st.chat_message("assistant"):
            thinking = st.empty()
            thinking.caption("Thinking...")
            try:
                content = first_candidate(post_ask({"chatHistory": history})).get("content") or {}
                text = reply_text({"content": content})
                thinking.empty()
                if text:
                    st.markdown(text)
                    st.session_state.chat_history = history + [
                        {"role": "model", "parts": [{"text": text}]}
                    ]
                else:
                    st.error(f"Error: {EMPTY_MESSAGE}")
            except requests.RequestException as e:
                thinking.empty()
                st.error(f"Error: Connection failed: {e}")
            except RuntimeError as e:
                thinking.empty()
                st.error(f"Error: {e}")
