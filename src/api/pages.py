"""
HTML pages - gate form and sanitized placeholder.

Plain markup. The placeholder never loads anything from the
protected upstream.
"""

from html import escape

_GATE_PAGE = """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width,initial-scale=1">
  <title>Private site</title>
</head>
<body>
  <main>
    <a href="/__logout">Reset</a>
    <h1>Private site</h1>
    <p>Enter the passphrase to receive an SMS code, or continue in public mode.</p>
    <section id="stage1">
      <input id="phrase" placeholder="Passphrase" autocomplete="off">
      <button id="btnStart">Unlock and send code</button>
      <a href="/__public">Public mode</a>
      <p id="msg1"></p>
    </section>
    <section id="stage2" hidden>
      <input id="code" inputmode="numeric" placeholder="SMS code" maxlength="8">
      <button id="btnVerify">Verify</button>
      <a href="/__gate">Back</a>
      <p id="msg2"></p>
    </section>
  </main>
<script>
async function post(path, body) {
  const r = await fetch(path, {method: "POST", headers: {"content-type": "application/json"}, body: JSON.stringify(body)});
  return {ok: r.ok, data: await r.json()};
}
document.getElementById("btnStart").onclick = async () => {
  const msg = document.getElementById("msg1");
  try {
    const r = await post("/api/start", {phrase: document.getElementById("phrase").value});
    msg.textContent = r.data.message;
    if (r.ok) document.getElementById("stage2").hidden = false;
  } catch (e) { msg.textContent = "Network error, please retry."; }
};
document.getElementById("btnVerify").onclick = async () => {
  const msg = document.getElementById("msg2");
  try {
    const r = await post("/api/verify", {code: document.getElementById("code").value.trim()});
    msg.textContent = r.data.message;
    if (r.ok) setTimeout(() => { location.href = "/"; }, 600);
  } catch (e) { msg.textContent = "Network error, please retry."; }
};
</script>
</body>
</html>
"""

_PLACEHOLDER_PAGE = """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width,initial-scale=1">
  <title>Public mode</title>
</head>
<body>
  <main>
    <p>Public mode (sanitized) &middot; {host} &middot; <a href="/__gate">Unlock</a></p>
    <h1>Site outline</h1>
    <p>This view shows which sections the site has, without any personal content.</p>
    <ul>
      <li>Countdown</li>
      <li>Anniversaries</li>
      <li>Photo album (hidden)</li>
      <li>Letters (hidden)</li>
      <li>Music</li>
    </ul>
  </main>
</body>
</html>
"""


def render_gate() -> str:
    return _GATE_PAGE


def render_placeholder(host: str) -> str:
    return _PLACEHOLDER_PAGE.replace("{host}", escape(host))
