from __future__ import annotations

# Runs inside the page. Relies on the functions exposed by BrowserRecognizer:
# playAudio, log, onSpeechResult, onSpeechError.
RECOGNITION_SCRIPT = """
async ({ language, startDelayMs, tailDelayMs, drainDelayMs }) => {
    const sleep = (ms) => new Promise((r) => setTimeout(r, ms));
    const Recognition = window.SpeechRecognition || window.webkitSpeechRecognition;
    if (!Recognition) {
        await window.log("speech recognition is not available in this browser");
        return;
    }

    const recognition = new Recognition();
    recognition.lang = language;
    recognition.continuous = true;
    recognition.interimResults = true;

    recognition.onresult = (event) => {
        let finalText = "";
        for (let i = event.resultIndex; i < event.results.length; ++i) {
            if (event.results[i].isFinal) {
                finalText += event.results[i][0].transcript;
            }
        }
        window.onSpeechResult(finalText);
    };

    recognition.onerror = (e) => {
        window.onSpeechError({
            name: "SpeechRecognitionErrorEvent",
            isTrusted: e.isTrusted,
            bubbles: e.bubbles,
            cancelBubble: e.cancelBubble,
            cancelable: e.cancelable,
            composed: e.composed,
            defaultPrevented: e.defaultPrevented,
            error: e.error,
            eventPhase: e.eventPhase,
            message: e.message,
            returnValue: e.returnValue,
            timeStamp: e.timeStamp,
            type: e.type,
            date: new Date().toISOString(),
        });
    };

    recognition.start();
    await sleep(startDelayMs);

    await window.playAudio();
    await sleep(tailDelayMs);

    recognition.stop();
    await sleep(drainDelayMs);
}
"""
