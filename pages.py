"""Public and admin page templates plus the data each page renders.

Public pages read content blocks and CMS rows from the database and fall
back to the static defaults below when a table or page has no rows yet.
"""
from jinja2 import DictLoader

from blocks import page_content, list_blocks, serialize_block
from editors import EDITORS, list_items
from models import to_dict
import settings

PUBLIC_PAGES = (
    "/", "/gallery", "/developers",
    "/eyecare", "/eyecare/conditions", "/eyecare/doctor", "/eyecare/appointment",
    "/gynecology", "/gynecology/health", "/gynecology/doctor", "/gynecology/appointment",
)
HERO_PREFIX = "hero-"


def fallback(name, content="", title=None, image_url=None, section="main"):
    return {
        "id": None, "type": "image" if image_url else "text", "page": None,
        "section": section, "specialty": "general", "name": name, "title": title,
        "content": content, "image_url": image_url, "order_index": 0, "metadata": {},
    }


# ---------------- Fallback content ----------------
DEFAULT_BLOCKS = {
    "/": {
        "hero-title": fallback("hero-title", "Expert care for your eyes and women's health"),
        "hero-subtitle": fallback("hero-subtitle",
                                  "Two specialist clinics under one roof, led by experienced doctors "
                                  "and modern diagnostics."),
    },
    "/eyecare": {
        "hero-title": fallback("hero-title", "Clear vision, lifelong eye health"),
        "hero-subtitle": fallback("hero-subtitle",
                                  "Comprehensive eye examinations, cataract and refractive surgery, "
                                  "and care for chronic eye conditions."),
    },
    "/gynecology": {
        "hero-title": fallback("hero-title", "Compassionate care for every stage of life"),
        "hero-subtitle": fallback("hero-subtitle",
                                  "Gynecology, fertility and pregnancy care in a supportive setting."),
    },
    "/eyecare/conditions": {
        "hero-title": fallback("hero-title", "Eye conditions we treat"),
    },
    "/gynecology/health": {
        "hero-title": fallback("hero-title", "Women's health"),
    },
    "/gallery": {
        "hero-title": fallback("hero-title", "Our clinic"),
    },
    "/developers": {
        "hero-title": fallback("hero-title", "Developers"),
        "hero-subtitle": fallback("hero-subtitle", "The team that built and maintains this website."),
    },
}

DEFAULT_ITEMS = {
    ("service_cards", "eyecare"): [
        {"title": "Comprehensive Eye Exams", "description": "Vision testing and full eye health assessment."},
        {"title": "Cataract Surgery", "description": "Modern phacoemulsification with premium lens options."},
        {"title": "Glaucoma Care", "description": "Early detection, monitoring and treatment."},
    ],
    ("service_cards", "gynecology"): [
        {"title": "Well-Woman Care", "description": "Annual check-ups, screening and preventive care."},
        {"title": "Fertility Treatment", "description": "Evaluation and assisted reproduction, IUI and IVF."},
        {"title": "Laparoscopic Surgery", "description": "Minimally invasive procedures with faster recovery."},
    ],
    ("service_cards", None): [
        {"title": "Eye Care", "description": "Complete eye care for all ages.", "link": "/eyecare"},
        {"title": "Gynecology", "description": "Women's health and fertility care.", "link": "/gynecology"},
    ],
    ("faqs", "gynecology"): [
        {"question": "When should I see a gynecologist?",
         "answer": "Annual check-ups usually begin around age 21, or earlier if you have symptoms "
                   "such as irregular periods or pelvic pain."},
        {"question": "How long does it usually take to get pregnant?",
         "answer": "Most couples conceive within 6-12 months. If you are over 35 and have been trying "
                   "for 6 months, we recommend a fertility consultation."},
        {"question": "Is laparoscopic surgery painful?",
         "answer": "It is minimally invasive; most patients have mild discomfort for a few days and "
                   "return to normal activities within 1-2 weeks."},
    ],
    ("conditions", "eyecare"): [
        {"name": "Cataract", "description": "Clouding of the natural lens causing blurred vision."},
        {"name": "Glaucoma", "description": "Optic nerve damage, often linked to raised eye pressure."},
        {"name": "Diabetic Retinopathy", "description": "Retinal damage caused by diabetes."},
    ],
    ("procedures", "gynecology"): [
        {"title": "Hysteroscopy", "description": "Examination and treatment inside the uterus."},
        {"title": "Laparoscopy", "description": "Keyhole surgery for fibroids, cysts and endometriosis."},
    ],
    ("doctor_profiles", "eyecare"): [
        {"name": "Dr. " + settings.DOCTORS["eye"]["name"], "title": "Senior Eye Surgeon",
         "bio": "Specialist in cataract and refractive surgery."},
    ],
    ("doctor_profiles", "gynecology"): [
        {"name": "Dr. " + settings.DOCTORS["gynecology"]["name"], "title": "Senior Gynecologist",
         "bio": "Specialist in fertility and laparoscopic surgery."},
    ],
}

DEVELOPERS = [
    {"name": "Web Team", "role": "Design and development"},
]

TIME_SLOTS = (
    "09:00 AM", "10:00 AM", "11:00 AM", "12:00 PM",
    "02:00 PM", "03:00 PM", "04:00 PM", "05:00 PM",
)
REASONS = {
    "eyecare": ("Routine eye exam", "Blurred vision", "Cataract consultation",
                "Glaucoma follow-up", "Eye infection or irritation", "Other"),
    "gynecology": ("Routine check-up", "Pregnancy care", "Fertility consultation",
                   "Menstrual problems", "Laparoscopic surgery consultation", "Other"),
}


def items_or_default(db, category, specialty=None):
    rows = list_items(db, category, specialty=specialty)
    if rows:
        return [to_dict(r) for r in rows]
    return [dict(item) for item in DEFAULT_ITEMS.get((category, specialty), [])]


def page_blocks(db, page):
    """Named blocks (hero etc.) and the remaining blocks in display order."""
    content = page_content(db, page, DEFAULT_BLOCKS.get(page))
    rest = [serialize_block(b) for b in list_blocks(db, page)
            if not (b.name or "").startswith(HERO_PREFIX)]
    return content, rest


def specialty_context(db, specialty):
    page = f"/{specialty}"
    content, blocks = page_blocks(db, page)
    ctx = {
        "specialty": specialty,
        "content": content,
        "blocks": blocks,
        "services": items_or_default(db, "service_cards", specialty),
        "testimonials": items_or_default(db, "testimonials", specialty),
        "doctors": items_or_default(db, "doctor_profiles", specialty),
        "departments": items_or_default(db, "departments", specialty),
    }
    if specialty == "gynecology":
        ctx["faqs"] = items_or_default(db, "faqs", specialty)
        ctx["insurance"] = items_or_default(db, "insurance_providers", specialty)
    else:
        ctx["procedures"] = items_or_default(db, "procedures", specialty)
    return ctx


def home_context(db):
    content, blocks = page_blocks(db, "/")
    return {
        "specialty": None,
        "content": content,
        "blocks": blocks,
        "services": items_or_default(db, "service_cards", None),
        "testimonials": items_or_default(db, "testimonials", None),
    }


def listing_context(db, page, specialty, sections):
    """``sections`` holds (heading, category, title key, body key) tuples."""
    content, blocks = page_blocks(db, page)
    return {
        "specialty": specialty,
        "content": content,
        "blocks": blocks,
        "sections": [(heading, items_or_default(db, category, specialty), title_key, body_key)
                     for heading, category, title_key, body_key in sections],
    }


def admin_categories():
    return {name: list(editor.fields) for name, editor in EDITORS.items()}


# ---------------- Templates ----------------
BASE_HTML = """<!doctype html><html><head>
<meta charset="utf-8"/><meta name="viewport" content="width=device-width, initial-scale=1"/>
<title>{% block title %}{{ clinic }}{% endblock %}</title>
<style>
:root { --bg:#f8fafc; --fg:#0f172a; --muted:#64748b; --card:#ffffff; --line:#e2e8f0;
        --accent:{% if specialty == 'gynecology' %}#d53f8c{% elif specialty == 'eyecare' %}#3182ce{% else %}#0e7490{% endif %}; }
*{box-sizing:border-box} body{margin:0;background:var(--bg);color:var(--fg);font-family:system-ui,-apple-system,Segoe UI,Roboto,Inter,sans-serif}
.wrap{max-width:1100px;margin:0 auto;padding:24px}
.header{display:flex;justify-content:space-between;align-items:center;margin-bottom:12px}
.brand{font-size:22px;font-weight:800;color:var(--accent);text-decoration:none}
.nav a{color:var(--fg);opacity:.9;text-decoration:none;margin-left:16px}
.hero{padding:32px 0;border-bottom:1px solid var(--line)}
.tag{font-size:36px;font-weight:900;line-height:1.1;margin:0 0 10px}
.sub,.muted{color:var(--muted)}
.cta{display:inline-block;margin-top:14px;background:var(--accent);color:#fff;font-weight:800;border-radius:10px;padding:10px 16px;text-decoration:none;border:0;cursor:pointer}
.section-title{font-weight:900;margin:26px 0 12px;font-size:20px}
.grid{display:grid;grid-template-columns:repeat(auto-fill, minmax(240px,1fr));gap:14px}
.card{background:var(--card);border:1px solid var(--line);border-radius:14px;overflow:hidden}
.img{width:100%;height:160px;object-fit:cover;background:#e2e8f0;display:block}
.pad{padding:14px}
.name{font-weight:800}
.input{width:100%;padding:10px 12px;border-radius:10px;border:1px solid var(--line);margin:6px 0 10px;font:inherit}
.err{color:#c53030} .ok{color:#2f855a}
table{width:100%;border-collapse:collapse} th,td{text-align:left;padding:8px;border-bottom:1px solid var(--line);font-size:14px}
</style></head><body><div class="wrap">
  <div class="header">
    <a class="brand" href="/">{{ clinic }}</a>
    <div class="nav">
      <a href="/eyecare">Eye Care</a>
      <a href="/gynecology">Gynecology</a>
      <a href="/gallery">Gallery</a>
      {% if specialty %}<a href="/{{ specialty }}/doctor">Doctor</a>
      <a href="/{{ specialty }}/appointment">Book Appointment</a>{% endif %}
    </div>
  </div>
  {% block content %}{% endblock %}
  <footer style="margin-top:32px" class="muted">&copy; {{ year }} {{ clinic }}. All rights reserved.
    &middot; <a href="/developers">Developers</a></footer>
</div></body></html>
"""

MACROS_HTML = """
{% macro hero(content) -%}
<section class="hero">
  {% if content.get('hero-image') and content['hero-image'].image_url %}
  <img class="img" style="height:260px;border-radius:14px" src="{{ content['hero-image'].image_url }}" alt="">
  {% endif %}
  <div class="tag">{{ content.get('hero-title', {}).get('content', '') }}</div>
  <div class="sub">{{ content.get('hero-subtitle', {}).get('content', '') }}</div>
</section>
{%- endmacro %}

{% macro render_blocks(blocks) -%}
{% for b in blocks %}
<div class="block" data-block-id="{{ b.id }}">
  {% if b.type == 'heading' %}<div class="section-title">{{ b.content }}</div>
  {% elif b.type == 'image' %}<img class="img" style="height:auto" src="{{ b.image_url }}" alt="{{ b.title or '' }}">
  {% elif b.type == 'list' %}<ul>{% for item in b.content.split('|') %}<li>{{ item }}</li>{% endfor %}</ul>
  {% elif b.type in ('button', 'link') %}<a class="{{ 'cta' if b.type == 'button' else '' }}" href="{{ b.metadata.get('url', '#') }}">{{ b.content }}</a>
  {% else %}{% if b.title %}<h3>{{ b.title }}</h3>{% endif %}<p>{{ b.content }}</p>{% endif %}
</div>
{% endfor %}
{%- endmacro %}

{% macro cards(items, title_key='title', body_key='description') -%}
<div class="grid">
{% for x in items %}
  <div class="card">
    {% if x.image_url %}<img class="img" src="{{ x.image_url }}" alt="">{% endif %}
    <div class="pad">
      <div class="name">{% if x.link %}<a href="{{ x.link }}">{{ x[title_key] }}</a>{% else %}{{ x[title_key] }}{% endif %}</div>
      <div class="muted">{{ x[body_key] or '' }}</div>
    </div>
  </div>
{% endfor %}
</div>
{%- endmacro %}
"""

HOME_HTML = """{% extends "base.html" %}{% from "macros.html" import hero, render_blocks, cards %}
{% block content %}
{{ hero(content) }}
{{ render_blocks(blocks) }}
<div class="section-title">Our Specialties</div>
{{ cards(services) }}
{% if testimonials %}<div class="section-title">What our patients say</div>
{{ cards(testimonials, 'name', 'content') }}{% endif %}
{% endblock %}
"""

SPECIALTY_HTML = """{% extends "base.html" %}{% from "macros.html" import hero, render_blocks, cards %}
{% block content %}
{{ hero(content) }}
<a class="cta" href="/{{ specialty }}/appointment">Book an Appointment</a>
{{ render_blocks(blocks) }}
{% if departments %}<div class="section-title">Departments</div>{{ cards(departments, 'name') }}{% endif %}
<div class="section-title">Services</div>
{{ cards(services) }}
{% if procedures %}<div class="section-title">Advanced Procedures</div>{{ cards(procedures) }}{% endif %}
{% if doctors %}<div class="section-title">Meet the Doctor</div>{{ cards(doctors, 'name', 'bio') }}{% endif %}
{% if testimonials %}<div class="section-title">Testimonials</div>{{ cards(testimonials, 'name', 'content') }}{% endif %}
{% if insurance %}<div class="section-title">Insurance Panel</div>{{ cards(insurance, 'name', 'specialty') }}{% endif %}
{% if faqs %}<div class="section-title">Frequently Asked Questions</div>
{% for f in faqs %}<details class="card pad" style="margin-bottom:8px"><summary class="name">{{ f.question }}</summary><p>{{ f.answer }}</p></details>{% endfor %}
{% endif %}
{% endblock %}
"""

LISTING_HTML = """{% extends "base.html" %}{% from "macros.html" import hero, render_blocks, cards %}
{% block content %}
{{ hero(content) }}
{{ render_blocks(blocks) }}
{% for title, items, title_key, body_key in sections %}
{% if items %}<div class="section-title">{{ title }}</div>{{ cards(items, title_key, body_key) }}{% endif %}
{% endfor %}
{% endblock %}
"""

DOCTOR_HTML = """{% extends "base.html" %}{% from "macros.html" import render_blocks %}
{% block content %}
{% for d in doctors %}
<section class="hero" style="display:grid;grid-template-columns:.8fr 1.2fr;gap:22px;align-items:center">
  <div>{% if d.image_url %}<img class="img" style="height:300px;border-radius:14px" src="{{ d.image_url }}" alt="Photo of {{ d.name }}">
       {% else %}<div class="img" style="height:300px;border-radius:14px"></div>{% endif %}</div>
  <div>
    <div class="tag">{{ d.name }}</div>
    <div class="name">{{ d.title or '' }}</div>
    {% if d.experience %}<div class="muted">{{ d.experience }}</div>{% endif %}
    <p>{{ d.bio or '' }}</p>
    {% if d.qualifications %}<ul>{% for q in d.qualifications.split('|') %}<li>{{ q }}</li>{% endfor %}</ul>{% endif %}
    <a class="cta" href="/{{ specialty }}/appointment">Book with {{ d.name }}</a>
  </div>
</section>
{% endfor %}
{{ render_blocks(blocks) }}
{% endblock %}
"""

APPOINTMENT_HTML = """{% extends "base.html" %}
{% block content %}
<section class="hero">
  <div class="tag">Book Your Appointment</div>
  <div class="sub">Schedule a consultation with Dr. {{ doctor.name }} at {{ doctor.clinic }}.</div>
</section>
<form id="f" class="card pad" style="max-width:640px;margin-top:18px" onsubmit="book(event)">
  <input class="input" id="first_name" placeholder="First name" required>
  <input class="input" id="last_name" placeholder="Last name" required>
  <input class="input" id="email" type="email" placeholder="Email" required>
  <input class="input" id="phone" placeholder="Phone" required>
  <input class="input" id="age" type="number" min="0" max="130" placeholder="Age (optional)">
  <select class="input" id="gender"><option value="">Gender (optional)</option><option>Female</option><option>Male</option><option>Other</option></select>
  <input class="input" id="date" type="date" min="{{ first_day }}"{% if last_day %} max="{{ last_day }}"{% endif %} required onchange="checkDate()">
  <div id="date-msg" class="err"></div>
  <select class="input" id="time" required><option value="">Select a time slot</option>
    {% for t in time_slots %}<option>{{ t }}</option>{% endfor %}</select>
  <select class="input" id="reason" required><option value="">Reason for visit</option>
    {% for r in reasons %}<option>{{ r }}</option>{% endfor %}</select>
  <textarea class="input" id="additional_info" rows="3" placeholder="Additional information"></textarea>
  <button class="cta" id="submit">Submit Appointment Request</button>
  <div id="msg" style="margin-top:10px"></div>
</form>
<script>
const DOCTOR = {{ doctor_key|tojson }};
function field(id){ return document.getElementById(id).value; }
async function checkDate(){
  const msg = document.getElementById('date-msg'); msg.textContent = '';
  const r = await fetch('/api/holidays/check', {method:'POST', headers:{'Content-Type':'application/json'},
    body: JSON.stringify({date: field('date'), doctor: DOCTOR})});
  const body = await r.json();
  if(!body.available){ msg.textContent = body.message; document.getElementById('date').value = ''; }
}
async function book(e){
  e.preventDefault();
  const msg = document.getElementById('msg'); msg.className = ''; msg.textContent = 'Submitting...';
  const data = {doctor: DOCTOR};
  ['first_name','last_name','email','phone','age','gender','date','time','reason','additional_info']
    .forEach(k => data[k] = field(k));
  const r = await fetch('/api/appointments', {method:'POST', headers:{'Content-Type':'application/json'}, body: JSON.stringify(data)});
  const body = await r.json();
  if(r.ok){ msg.className = 'ok'; msg.textContent = "Your appointment request has been submitted. We'll contact you shortly to confirm it."; document.getElementById('f').reset(); }
  else { msg.className = 'err'; msg.textContent = body.error || 'There was a problem submitting your appointment request. Please try again.'; }
}
</script>
{% endblock %}
"""

GALLERY_HTML = """{% extends "base.html" %}{% from "macros.html" import hero, render_blocks %}
{% block content %}
{{ hero(content) }}
{{ render_blocks(blocks) }}
<div class="grid" style="margin-top:18px">
{% for g in images %}
  <figure class="card" style="margin:0"><img class="img" src="{{ g.image_url }}" alt="{{ g.title or '' }}">
    {% if g.caption or g.title %}<figcaption class="pad muted">{{ g.caption or g.title }}</figcaption>{% endif %}</figure>
{% else %}
  <div class="muted">Photos coming soon.</div>
{% endfor %}
</div>
{% endblock %}
"""

DEVELOPERS_HTML = """{% extends "base.html" %}{% from "macros.html" import hero, render_blocks, cards %}
{% block content %}
{{ hero(content) }}
{{ render_blocks(blocks) }}
{{ cards(developers, 'name', 'role') }}
{% endblock %}
"""

# ---------------- Admin ----------------
ADMIN_BASE_HTML = """{% extends "base.html" %}
{% block title %}{{ clinic }} Admin{% endblock %}
{% block content %}
<div style="display:flex;gap:16px;margin-bottom:16px" class="nav">
  <a href="/admin/dashboard">Dashboard</a><a href="/admin/edit-content">Edit Content</a>
  <a href="/admin/export-data">Export Data</a><a href="/logout">Log out</a>
</div>
<div id="toast" style="min-height:22px"></div>
<script>
function toast(text, bad){ const t = document.getElementById('toast'); t.className = bad ? 'err' : 'ok'; t.textContent = text; }
async function api(method, url, body){
  const opts = {method, headers:{}};
  if(body instanceof FormData){ opts.body = body; }
  else if(body !== undefined){ opts.headers['Content-Type'] = 'application/json'; opts.body = JSON.stringify(body); }
  const r = await fetch(url, opts);
  const data = r.status === 204 ? {} : await r.json();
  if(!r.ok){ toast(data.error || 'Something went wrong. Please try again.', true); throw new Error(data.error); }
  return data;
}
const ENTITIES = {'&': '&amp;', '<': '&lt;', '>': '&gt;', '"': '&quot;', "'": '&#39;'};
function esc(s){ return (s == null ? '' : String(s)).replace(/[&<>"']/g, c => ENTITIES[c]); }
</script>
{% block admin %}{% endblock %}
{% endblock %}
"""

LOGIN_HTML = """{% extends "base.html" %}
{% block title %}{{ clinic }} – Admin Login{% endblock %}
{% block content %}
<div class="card pad" style="max-width:420px;margin:8vh auto">
  <h1>{{ clinic }}</h1>
  <div class="muted">Authorized access for administrators.</div>
  <form onsubmit="login(event)">
    <input class="input" id="email" type="email" placeholder="Email" required/>
    <input class="input" id="pw" type="password" placeholder="Password" required/>
    <button class="cta" style="width:100%">Sign In</button>
    <div id="err" class="err" style="display:none;margin-top:8px">Invalid credentials</div>
  </form>
  <div style="margin-top:10px"><a href="/admin/forgot-password">Forgot password?</a></div>
</div>
<script>
async function login(e){
  e.preventDefault();
  const r = await fetch('/login', {method:'POST', headers:{'Content-Type':'application/json'},
    body: JSON.stringify({ email: document.getElementById('email').value.trim(), password: document.getElementById('pw').value })});
  if(r.ok){ location.href = '/admin/dashboard'; } else { document.getElementById('err').style.display = 'block'; }
}
</script>
{% endblock %}
"""

FORGOT_HTML = """{% extends "base.html" %}
{% block content %}
<div class="card pad" style="max-width:420px;margin:8vh auto">
  <h2>Reset your password</h2>
  <div class="muted">We'll email a 6-digit verification code to the admin address.</div>
  <form onsubmit="send(event)">
    <input class="input" id="email" type="email" placeholder="Admin email" required/>
    <button class="cta" style="width:100%">Send code</button>
  </form>
  <div id="msg" style="margin-top:8px"></div>
</div>
<script>
async function send(e){
  e.preventDefault();
  const email = document.getElementById('email').value.trim();
  await fetch('/admin/forgot-password', {method:'POST', headers:{'Content-Type':'application/json'}, body: JSON.stringify({email})});
  location.href = '/admin/reset-password?email=' + encodeURIComponent(email);
}
</script>
{% endblock %}
"""

RESET_HTML = """{% extends "base.html" %}
{% block content %}
<div class="card pad" style="max-width:420px;margin:8vh auto">
  <h2>Choose a new password</h2>
  <form onsubmit="reset(event)">
    <input class="input" id="email" type="email" placeholder="Admin email" value="{{ email }}" required/>
    <input class="input" id="code" placeholder="6-digit code" inputmode="numeric" required/>
    <input class="input" id="pw" type="password" placeholder="New password" minlength="8" required/>
    <input class="input" id="pw2" type="password" placeholder="Confirm password" minlength="8" required/>
    <button class="cta" style="width:100%">Reset password</button>
  </form>
  <div id="msg" style="margin-top:8px"></div>
</div>
<script>
async function reset(e){
  e.preventDefault();
  const msg = document.getElementById('msg');
  if(document.getElementById('pw').value !== document.getElementById('pw2').value){ msg.className='err'; msg.textContent='Passwords do not match'; return; }
  const r = await fetch('/admin/reset-password', {method:'POST', headers:{'Content-Type':'application/json'},
    body: JSON.stringify({email: document.getElementById('email').value.trim(), code: document.getElementById('code').value.trim(), password: document.getElementById('pw').value})});
  const body = await r.json();
  if(r.ok){ msg.className='ok'; msg.innerHTML = 'Password updated. <a href="/admin">Sign in</a>'; }
  else { msg.className='err'; msg.textContent = body.error || 'Could not reset password'; }
}
</script>
{% endblock %}
"""

DASHBOARD_HTML = """{% extends "admin_base.html" %}
{% block admin %}
<div style="display:flex;gap:8px;align-items:center">
  <span class="name">View calendar for:</span>
  <select class="input" id="doctor" style="width:auto" onchange="refresh()">
    <option value="all">All Doctors</option>
    {% for key, d in doctors.items() %}<option value="{{ key }}">{{ d.specialty|title }} (Dr. {{ d.name }})</option>{% endfor %}
  </select>
  <input class="input" id="month" type="month" style="width:auto" value="{{ month }}" onchange="refresh()">
</div>
<div class="muted" style="font-size:13px">
  <span style="color:#e53e3e">&#9679;</span> National holiday &middot; <span style="background:#e2e8f0">&nbsp;&nbsp;</span> Custom holiday &middot;
  <span style="color:#38a169">&#9679;</span> Confirmed &middot; <span style="color:#d69e2e">&#9679;</span> Pending &middot;
  <span style="color:#3182ce">&#9679;</span> Completed &middot; <span style="color:#fc8181">&#9679;</span> Cancelled
</div>
<div id="calendar" class="grid" style="grid-template-columns:repeat(7,1fr);gap:4px;margin:12px 0"></div>
<div class="card pad"><div class="name" id="day-title">Select a day</div><div id="day"></div>
  <div class="section-title">Add Custom Holiday</div>
  <input class="input" id="h-name" placeholder="Holiday name">
  <textarea class="input" id="h-desc" rows="2" placeholder="Description (optional)"></textarea>
  <button class="cta" onclick="addHoliday()">Add Holiday</button>
  <button class="cta" onclick="importHolidays()">Import national holidays</button>
  <div class="section-title">Holidays</div><div id="holidays"></div>
</div>
<div class="section-title">Recent Appointments</div>
<table><thead><tr><th>Patient</th><th>Date &amp; Time</th><th>Specialty</th><th>Reason</th><th>Status</th></tr></thead>
<tbody id="appts"></tbody></table>
<script>
const STATUSES = ['pending','confirmed','completed','cancelled'];
const DOTS = {confirmed:'#38a169', pending:'#d69e2e', completed:'#3182ce', cancelled:'#fc8181'};
let selectedDate = null;
function doctor(){ return document.getElementById('doctor').value; }
async function refresh(){ await Promise.all([loadCalendar(), loadAppointments(), loadHolidays()]); }
async function loadCalendar(){
  const [y, m] = document.getElementById('month').value.split('-');
  const days = await api('GET', `/api/calendar?year=${y}&month=${+m}&doctor=${doctor()}`);
  const pad = (new Date(+y, +m - 1, 1).getDay());
  let html = '<div></div>'.repeat(pad);
  for(const d of days){
    const dots = Object.entries(d.status_counts).filter(([s, n]) => n > 0 && s !== 'cancelled')
      .map(([s]) => `<span style="color:${DOTS[s]}">&#9679;</span>`).join('');
    const bg = d.has_custom_holiday ? '#e2e8f0' : (d.date === selectedDate ? '#bee3f8' : '#fff');
    const title = d.holidays.map(h => h.name + (h.description ? ': ' + h.description : '')).join('\\n');
    html += `<div class="card pad" style="background:${bg};cursor:pointer;padding:6px" title="${esc(title)}" onclick="selectDay('${d.date}')">
      <div>${+d.date.slice(8)} ${dots}</div>
      ${d.has_holiday && !d.has_custom_holiday ? '<span style="color:#e53e3e">&#9679;</span>' : ''}
      ${d.appointment_count ? `<div class="muted" style="font-size:11px">${d.appointment_count}</div>` : ''}</div>`;
  }
  document.getElementById('calendar').innerHTML = html;
}
async function selectDay(day){
  selectedDate = day;
  const d = await api('GET', `/api/calendar/day?date=${day}&doctor=${doctor()}`);
  document.getElementById('day-title').textContent = `Appointments for ${day} (${d.appointments.length})`;
  document.getElementById('day').innerHTML = d.holidays.map(h => `<div class="err">${esc(h.name)}</div>`).join('') +
    d.appointments.map(a => `<div>${esc(a.first_name)} ${esc(a.last_name)} &middot; ${esc(a.time)} &middot; ${esc(a.status)}</div>`).join('');
  loadCalendar();
}
async function loadAppointments(){
  const rows = await api('GET', `/api/appointments?doctor=${doctor()}`);
  document.getElementById('appts').innerHTML = rows.map(a => `<tr><td><b>${esc(a.first_name)} ${esc(a.last_name)}</b><br><span class="muted">${esc(a.email)}</span></td>
    <td>${esc(a.date)}<br><span class="muted">${esc(a.time)}</span></td><td>${esc(a.specialty)}</td><td>${esc(a.reason)}</td>
    <td><select onchange="setStatus(${a.id}, this.value)">${STATUSES.map(s => `<option ${s === a.status ? 'selected' : ''}>${s}</option>`).join('')}</select></td></tr>`).join('')
    || '<tr><td colspan="5" class="muted">No appointments found</td></tr>';
}
async function setStatus(id, status){ await api('PATCH', `/api/appointments/${id}/status`, {status}); toast('Appointment ' + status); refresh(); }
async function loadHolidays(){
  const rows = await api('GET', `/api/holidays?doctor=${doctor()}`);
  document.getElementById('holidays').innerHTML = rows.map(h => `<div>${esc(h.date)} &middot; <b>${esc(h.name)}</b> <span class="muted">${esc(h.type)}</span>
    <button onclick="deleteHoliday(${h.id})">Remove</button></div>`).join('') || '<div class="muted">No holidays</div>';
}
async function addHoliday(){
  if(!selectedDate){ toast('Please select a date for the holiday.', true); return; }
  await api('POST', '/api/holidays', {date: selectedDate, name: document.getElementById('h-name').value,
    description: document.getElementById('h-desc').value, doctor: doctor()});
  toast('The holiday has been added to the calendar.'); refresh();
}
async function deleteHoliday(id){ await api('DELETE', `/api/holidays/${id}`); toast('Holiday removed'); refresh(); }
async function importHolidays(){
  const y = document.getElementById('month').value.split('-')[0];
  const r = await api('POST', '/api/holidays/import', {year: +y}); toast(`Imported ${r.count} national holidays`); refresh();
}
refresh();
</script>
{% endblock %}
"""

EXPORT_HTML = """{% extends "admin_base.html" %}
{% block admin %}
<div class="card pad">
  <div class="section-title">Export appointments</div>
  <select class="input" id="fmt" style="width:auto"><option value="csv">CSV</option><option value="json">JSON</option></select>
  <select class="input" id="spec" style="width:auto"><option value="all">All</option><option value="eyecare">Eye Care</option><option value="gynecology">Gynecology</option></select>
  <button class="cta" onclick="location.href='/api/appointments/export?format=' + document.getElementById('fmt').value + '&specialty=' + document.getElementById('spec').value">Download</button>
  <p class="muted">Exported data includes patient details and appointment status. Handle it as sensitive medical data.</p>
</div>
{% endblock %}
"""

EDIT_CONTENT_HTML = """{% extends "admin_base.html" %}
{% block admin %}
<div class="card pad">
  <div class="section-title">Page blocks</div>
  <select class="input" id="page" style="width:auto" onchange="loadBlocks()">
    {% for p in pages %}<option>{{ p }}</option>{% endfor %}</select>
  <select class="input" id="btype" style="width:auto">{% for t in block_types %}<option>{{ t }}</option>{% endfor %}</select>
  <button class="cta" onclick="addBlock()">Add Block</button>
  <a href="#" onclick="window.open(document.getElementById('page').value); return false">Preview</a>
  <div id="blocks"></div>
</div>
<div class="card pad" style="margin-top:16px">
  <div class="section-title">Content tables</div>
  <select class="input" id="cat" style="width:auto" onchange="loadItems()">
    {% for c in categories %}<option>{{ c }}</option>{% endfor %}</select>
  <div id="items"></div>
</div>
<script>
const CATEGORIES = {{ categories|tojson }};
function page(){ return document.getElementById('page').value; }
async function loadBlocks(){
  const rows = await api('GET', '/api/blocks?page=' + encodeURIComponent(page()));
  document.getElementById('blocks').innerHTML = rows.map(b => `<div class="card pad" style="margin:8px 0">
    <div class="muted">${esc(b.name)} &middot; ${esc(b.type)} &middot; #${b.order_index}</div>
    <input class="input" id="t-${b.id}" value="${esc(b.title)}" placeholder="Title">
    <textarea class="input" id="c-${b.id}" rows="3">${esc(b.content)}</textarea>
    ${b.image_url ? `<img src="${esc(b.image_url)}" style="max-height:80px">` : ''}
    <input type="file" id="f-${b.id}" accept=".jpg,.jpeg,.png,.webp">
    <button onclick="saveBlock(${b.id})">Save</button> <button onclick="moveBlock(${b.id},'up')">Up</button>
    <button onclick="moveBlock(${b.id},'down')">Down</button> <button onclick="uploadBlock(${b.id})">Upload image</button>
    <button onclick="deleteBlock(${b.id})">Delete</button></div>`).join('') || '<div class="muted">No blocks on this page yet.</div>';
}
async function addBlock(){ await api('POST', '/api/blocks', {page: page(), type: document.getElementById('btype').value}); toast('Block added'); loadBlocks(); }
async function saveBlock(id){ await api('PATCH', `/api/blocks/${id}`, {title: document.getElementById('t-'+id).value, content: document.getElementById('c-'+id).value}); toast('Saved'); }
async function moveBlock(id, direction){ await api('POST', `/api/blocks/${id}/move`, {direction}); loadBlocks(); }
async function deleteBlock(id){ if(!confirm('Delete this block?')) return; await api('DELETE', `/api/blocks/${id}`); toast('Block deleted'); loadBlocks(); }
async function uploadBlock(id){
  const f = document.getElementById('f-'+id).files[0]; if(!f){ toast('Choose an image first', true); return; }
  const fd = new FormData(); fd.append('file', f); await api('POST', `/api/blocks/${id}/image`, fd); toast('Image uploaded'); loadBlocks();
}
function cat(){ return document.getElementById('cat').value; }
function inputs(prefix, fields, item){
  return fields.map(k => `<input class="input" id="${prefix}-${k}" placeholder="${k}" value="${esc(item[k])}">`).join('');
}
async function loadItems(){
  const fields = CATEGORIES[cat()];
  const rows = await api('GET', '/api/editors/' + cat());
  document.getElementById('items').innerHTML = `<div class="card pad" style="margin:8px 0"><b>New</b>${inputs('new', fields, {})}
      <button onclick="createItem()">Add</button></div>` +
    rows.map(x => `<div class="card pad" style="margin:8px 0">${inputs('i' + x.id, fields, x)}
      <button onclick="saveItem(${x.id})">Save</button> <button onclick="moveItem(${x.id},'up')">Up</button>
      <button onclick="moveItem(${x.id},'down')">Down</button> <button onclick="deleteItem(${x.id})">Delete</button></div>`).join('');
}
// blank inputs are left out of a new item but clear the field on save
function collect(prefix, clear){ const out = {}; CATEGORIES[cat()].forEach(k => { const v = document.getElementById(prefix + '-' + k).value; if(v !== '') out[k] = v; else if(clear) out[k] = null; }); return out; }
async function createItem(){ await api('POST', '/api/editors/' + cat(), collect('new')); toast('Added'); loadItems(); }
async function saveItem(id){ await api('PATCH', `/api/editors/${cat()}/${id}`, collect('i' + id, true)); toast('Saved'); }
async function moveItem(id, direction){ await api('POST', `/api/editors/${cat()}/${id}/move`, {direction}); loadItems(); }
async function deleteItem(id){ if(!confirm('Delete this item?')) return; await api('DELETE', `/api/editors/${cat()}/${id}`); toast('Deleted'); loadItems(); }
loadBlocks(); loadItems();
</script>
{% endblock %}
"""

TEMPLATES = {
    "base.html": BASE_HTML,
    "macros.html": MACROS_HTML,
    "home.html": HOME_HTML,
    "specialty.html": SPECIALTY_HTML,
    "listing.html": LISTING_HTML,
    "doctor.html": DOCTOR_HTML,
    "appointment.html": APPOINTMENT_HTML,
    "gallery.html": GALLERY_HTML,
    "developers.html": DEVELOPERS_HTML,
    "admin_base.html": ADMIN_BASE_HTML,
    "admin_login.html": LOGIN_HTML,
    "admin_forgot.html": FORGOT_HTML,
    "admin_reset.html": RESET_HTML,
    "admin_dashboard.html": DASHBOARD_HTML,
    "admin_export.html": EXPORT_HTML,
    "admin_edit_content.html": EDIT_CONTENT_HTML,
}

template_loader = DictLoader(TEMPLATES)
